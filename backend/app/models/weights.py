"""Ranking weight models - user-tunable scoring configuration."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from backend.app.models.common import Category

SubWeight = Annotated[float, Field(ge=0, le=100)]

DEFAULT_SUB_WEIGHT = 50.0
PRICE_WEIGHT = "price_weight"

# Criteria each category is scored on
CATEGORY_CRITERIA: dict[Category, tuple[str, ...]] = {
    Category.flights: ("price_weight", "stops_weight", "duration_weight", "trust_weight"),
    Category.hotels: ("price_weight", "trust_weight", "location_weight", "amenities_weight"),
    Category.meeting_rooms: (
        "price_weight",
        "capacity_weight",
        "trust_weight",
        "amenities_weight",
    ),
    Category.catering: ("price_weight", "trust_weight", "dietary_weight"),
    Category.transport: ("price_weight", "capacity_weight", "trust_weight"),
}


def _default_importance() -> dict[Category, float]:
    return {
        Category.flights: 30.0,
        Category.hotels: 40.0,
        Category.meeting_rooms: 15.0,
        Category.catering: 15.0,
        Category.transport: 10.0,
    }


def _default_hotel_weights() -> dict[str, float]:
    return {
        "price_weight": 50.0,
        "trust_weight": 40.0,
        "location_weight": 25.0,
        "amenities_weight": 15.0,
    }


class Weights(BaseModel):
    """Category importance plus per-category criterion sub-weights.

    Importance values need not sum to 100; they are normalized at scoring time
    over the categories present in a package. A category missing from
    ``category_importance`` has zero importance. Criteria missing from a
    sub-weight group default to 50.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    category_importance: dict[Category, Annotated[float, Field(ge=0)]] = Field(
        default_factory=_default_importance
    )
    flights: dict[str, SubWeight] = Field(default_factory=dict)
    hotels: dict[str, SubWeight] = Field(default_factory=_default_hotel_weights)
    meeting_rooms: dict[str, SubWeight] = Field(default_factory=dict)
    catering: dict[str, SubWeight] = Field(default_factory=dict)
    transport: dict[str, SubWeight] = Field(default_factory=dict)

    @field_validator("flights", "hotels", "meeting_rooms", "catering", "transport")
    @classmethod
    def validate_known_criteria(
        cls, v: dict[str, float], info: ValidationInfo
    ) -> dict[str, float]:
        """Reject criteria the group's own category is not scored on."""
        category = Category(info.field_name)
        unknown = sorted(set(v) - set(CATEGORY_CRITERIA[category]))
        if unknown:
            raise ValueError(
                f"unknown weight criteria for {category.value}: {', '.join(unknown)}"
            )
        return v

    def importance(self, category: Category) -> float:
        """Raw (unnormalized) importance for a category."""
        return float(self.category_importance.get(category, 0.0))

    def sub_weights(self, category: Category) -> dict[str, float]:
        """Criterion weights for a category with defaults filled in."""
        group: dict[str, float] = getattr(self, category.value)
        return {
            name: float(group.get(name, DEFAULT_SUB_WEIGHT))
            for name in CATEGORY_CRITERIA[category]
        }

    def price_weight(self, category: Category) -> float:
        """Effective price_weight for a category."""
        return self.sub_weights(category)[PRICE_WEIGHT]
