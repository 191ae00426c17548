"""Unit tests for domain models."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from backend.app.models.cart import CartAction
from backend.app.models.common import CATEGORY_ORDER, Category, quantize_money
from backend.app.models.trip import RequirementsDraft, TripRequirements
from backend.app.models.weights import Weights


class TestCategory:
    """Test Category aliases and ordering."""

    @pytest.mark.parametrize(
        ("alias", "expected"),
        [
            ("hotel", Category.hotels),
            ("Venues", Category.meeting_rooms),
            ("meeting-room", Category.meeting_rooms),
            ("flight", Category.flights),
            ("transport", Category.transport),
        ],
    )
    def test_aliases_resolve(self, alias: str, expected: Category) -> None:
        assert Category(alias) is expected

    def test_unknown_category_rejected(self) -> None:
        with pytest.raises(ValueError):
            Category("spa")

    def test_canonical_order(self) -> None:
        assert [c.value for c in CATEGORY_ORDER] == [
            "flights",
            "hotels",
            "meeting_rooms",
            "catering",
            "transport",
        ]


class TestTripRequirements:
    """Test TripRequirements validation and derived values."""

    def test_nights_and_days(self) -> None:
        req = TripRequirements(
            destination="Denver",
            start_date=date(2026, 5, 1),
            end_date=date(2026, 5, 4),
            headcount=10,
            budget=Decimal("1000"),
        )
        assert req.nights == 3
        assert req.days == 4

    def test_same_day_trip_books_one_night(self) -> None:
        req = TripRequirements(
            destination="Denver",
            start_date=date(2026, 5, 1),
            end_date=date(2026, 5, 1),
            headcount=1,
            budget=Decimal("0"),
        )
        assert req.nights == 1
        assert req.days == 1

    @pytest.mark.parametrize(
        "overrides",
        [
            {"headcount": 0},
            {"budget": Decimal("-1")},
            {"destination": "   "},
            {"end_date": date(2026, 4, 30)},
        ],
    )
    def test_invalid_requirements_rejected(self, overrides: dict[str, object]) -> None:
        fields: dict[str, object] = {
            "destination": "Denver",
            "start_date": date(2026, 5, 1),
            "end_date": date(2026, 5, 3),
            "headcount": 5,
            "budget": Decimal("100"),
        }
        fields.update(overrides)
        with pytest.raises(ValidationError):
            TripRequirements(**fields)

    def test_draft_merge_prefers_overrides(self) -> None:
        extracted = RequirementsDraft(destination="Austin", headcount=12)
        merged = extracted.merged_with(RequirementsDraft(headcount=20))

        assert merged.destination == "Austin"
        assert merged.headcount == 20


class TestWeights:
    """Test Weights defaults and validation."""

    def test_defaults(self) -> None:
        weights = Weights()

        assert weights.importance(Category.hotels) == 40.0
        assert weights.importance(Category.transport) == 10.0
        assert weights.sub_weights(Category.hotels) == {
            "price_weight": 50.0,
            "trust_weight": 40.0,
            "location_weight": 25.0,
            "amenities_weight": 15.0,
        }
        assert weights.price_weight(Category.flights) == 50.0

    def test_accepts_client_category_aliases(self) -> None:
        weights = Weights.model_validate(
            {
                "category_importance": {"hotels": 80, "venues": 20},
                "hotels": {"price_weight": 80},
            }
        )

        assert weights.importance(Category.meeting_rooms) == 20.0
        assert weights.importance(Category.flights) == 0.0
        assert weights.sub_weights(Category.hotels)["price_weight"] == 80.0
        assert weights.sub_weights(Category.hotels)["trust_weight"] == 50.0

    def test_unknown_criterion_rejected(self) -> None:
        with pytest.raises(ValidationError, match="unknown weight criteria"):
            Weights(hotels={"vibes_weight": 10})

    def test_criterion_from_another_category_rejected(self) -> None:
        with pytest.raises(ValidationError, match="unknown weight criteria for flights"):
            Weights(flights={"location_weight": 90})

        assert Weights(hotels={"location_weight": 90}).sub_weights(Category.hotels)[
            "location_weight"
        ] == 90.0

    def test_sub_weight_range_enforced(self) -> None:
        with pytest.raises(ValidationError):
            Weights(flights={"price_weight": 120})


def test_quantize_money_rounds_half_up() -> None:
    assert quantize_money(Decimal("0.125")) == Decimal("0.13")
    assert quantize_money(Decimal("87.5")) == Decimal("87.50")


class TestCartAction:
    def test_update_requires_quantity(self) -> None:
        with pytest.raises(ValidationError, match="quantity is required"):
            CartAction(category=Category.hotels, action="update")

    def test_remove_and_zero_update_accepted(self) -> None:
        assert CartAction(category=Category.hotels, action="remove").quantity is None
        assert CartAction(category=Category.hotels, action="update", quantity=0).quantity == 0
