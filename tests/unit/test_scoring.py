"""Unit tests for criterion favorabilities and package scores."""

from decimal import Decimal

import pytest

from backend.app.models.common import Category
from backend.app.models.options import (
    CateringOption,
    FlightOption,
    HotelOption,
    MeetingRoomOption,
)
from backend.app.models.weights import Weights
from backend.app.orchestration.scoring import (
    category_score,
    favorabilities,
    normalize_fractions,
    observe,
    package_score,
    price_favorability,
)


def hotel(option_id: str, price: str, **kwargs: object) -> HotelOption:
    return HotelOption(option_id=option_id, vendor=option_id, unit_price=Decimal(price), **kwargs)


class TestNormalizeFractions:
    def test_fractions_sum_to_one(self) -> None:
        fractions = normalize_fractions({"a": 30.0, "b": 10.0})
        assert fractions == {"a": 0.75, "b": 0.25}

    def test_zero_total_gives_equal_fractions(self) -> None:
        assert normalize_fractions({"a": 0.0, "b": 0.0}) == {"a": 0.5, "b": 0.5}

    def test_empty(self) -> None:
        assert normalize_fractions({}) == {}


class TestFavorabilities:
    def test_price_relative_to_observed_range(self) -> None:
        stats = observe([hotel("a", "200"), hotel("b", "100"), hotel("c", "150")])

        assert price_favorability(Decimal("100"), stats) == 1.0
        assert price_favorability(Decimal("200"), stats) == 0.0
        assert price_favorability(Decimal("150"), stats) == 0.5

    def test_price_all_equal_is_one(self) -> None:
        stats = observe([hotel("a", "100"), hotel("b", "100")])
        assert price_favorability(Decimal("100"), stats) == 1.0

    def test_unknowns_are_neutral(self) -> None:
        option = hotel("a", "100")
        favor = favorabilities(option, observe([option]), headcount=10)

        assert favor["trust_weight"] == 0.5
        assert favor["location_weight"] == 0.5
        assert favor["amenities_weight"] == 0.0

    def test_hotel_trust_uses_star_rating_without_rating(self) -> None:
        option = hotel("a", "100", star_rating=4.0)
        favor = favorabilities(option, observe([option]), headcount=1)
        assert favor["trust_weight"] == pytest.approx(0.8)

    def test_flight_stops_and_duration(self) -> None:
        direct = FlightOption(
            option_id="d", vendor="UA", unit_price=Decimal("300"), stops=0, duration_minutes=200
        )
        connecting = FlightOption(
            option_id="c", vendor="DL", unit_price=Decimal("250"), stops=1, duration_minutes=400
        )
        stats = observe([direct, connecting])

        assert favorabilities(direct, stats, 5)["stops_weight"] == 1.0
        assert favorabilities(connecting, stats, 5)["stops_weight"] == 0.5
        assert favorabilities(direct, stats, 5)["duration_weight"] == 1.0
        assert favorabilities(connecting, stats, 5)["duration_weight"] == 0.0

    def test_capacity_capped_at_headcount(self) -> None:
        small = MeetingRoomOption(option_id="s", vendor="v", unit_price=Decimal("1"), capacity=5)
        large = MeetingRoomOption(option_id="l", vendor="v", unit_price=Decimal("1"), capacity=500)
        stats = observe([small, large])

        assert favorabilities(small, stats, 20)["capacity_weight"] == 0.25
        assert favorabilities(large, stats, 20)["capacity_weight"] == 1.0

    def test_dietary_relative_to_max_observed(self) -> None:
        few = CateringOption(
            option_id="f", vendor="v", unit_price=Decimal("1"), dietary_options=("vegan",)
        )
        many = CateringOption(
            option_id="m",
            vendor="v",
            unit_price=Decimal("1"),
            dietary_options=("vegan", "halal", "kosher", "gluten_free"),
        )
        stats = observe([few, many])

        assert favorabilities(few, stats, 1)["dietary_weight"] == 0.25
        assert favorabilities(many, stats, 1)["dietary_weight"] == 1.0


class TestScores:
    def test_category_score_in_unit_interval(self) -> None:
        a, b = hotel("a", "200", rating=5.0), hotel("b", "100", rating=1.0)
        stats = observe([a, b])
        weights = Weights()

        for option in (a, b):
            assert 0.0 <= category_score(Category.hotels, option, stats, weights, 10) <= 1.0

    def test_price_weight_favors_cheaper_hotel(self) -> None:
        a, b = hotel("a", "200"), hotel("b", "100")
        stats = observe([a, b])
        weights = Weights(hotels={"price_weight": 80})

        assert category_score(Category.hotels, b, stats, weights, 10) > category_score(
            Category.hotels, a, stats, weights, 10
        )

    def test_package_score_normalizes_importance_over_present_categories(self) -> None:
        h = hotel("a", "100", rating=5.0)
        stats = {Category.hotels: observe([h])}
        weights = Weights(category_importance={Category.hotels: 40, Category.flights: 60})

        score, per_category = package_score({Category.hotels: h}, stats, weights, 10)

        assert score == pytest.approx(per_category[Category.hotels])
