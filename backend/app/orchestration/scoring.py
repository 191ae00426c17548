"""Criterion favorabilities and category/package scores.

Every favorability is in [0, 1], higher is better. Relative criteria (price,
location, duration, amenities, dietary) are measured against the range
observed across all of that category's discovered options, not only the
options that made it into a package.
"""

from collections.abc import Hashable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import TypeVar

from backend.app.models.common import Category
from backend.app.models.options import (
    CateringOption,
    FlightOption,
    HotelOption,
    MeetingRoomOption,
    OptionBase,
    TransportOption,
)
from backend.app.models.weights import Weights

K = TypeVar("K", bound=Hashable)

UNKNOWN = 0.5


@dataclass(frozen=True)
class CategoryStats:
    """Observed ranges for one category's discovered options."""

    min_price: Decimal | None = None
    max_price: Decimal | None = None
    min_distance_km: float | None = None
    max_distance_km: float | None = None
    min_duration_minutes: int | None = None
    max_duration_minutes: int | None = None
    max_amenities: int = 0
    max_dietary: int = 0


def observe(options: Sequence[OptionBase]) -> CategoryStats:
    """Collect observed ranges over a category's options."""
    prices = [o.unit_price for o in options]
    distances = [
        o.distance_km for o in options if isinstance(o, HotelOption) and o.distance_km is not None
    ]
    durations = [
        o.duration_minutes
        for o in options
        if isinstance(o, FlightOption) and o.duration_minutes is not None
    ]
    dietary = [len(o.dietary_options) for o in options if isinstance(o, CateringOption)]

    return CategoryStats(
        min_price=min(prices) if prices else None,
        max_price=max(prices) if prices else None,
        min_distance_km=min(distances) if distances else None,
        max_distance_km=max(distances) if distances else None,
        min_duration_minutes=min(durations) if durations else None,
        max_duration_minutes=max(durations) if durations else None,
        max_amenities=max((len(o.amenities) for o in options), default=0),
        max_dietary=max(dietary, default=0),
    )


def normalize_fractions(values: Mapping[K, float]) -> dict[K, float]:
    """Scale values to sum to 1; equal fractions when they sum to 0."""
    if not values:
        return {}
    total = sum(values.values())
    if total <= 0:
        share = 1.0 / len(values)
        return {k: share for k in values}
    return {k: v / total for k, v in values.items()}


def _inverse_in_range(value: float | None, lo: float | None, hi: float | None) -> float:
    """1.0 at the low end of the observed range, 0.0 at the high end."""
    if value is None or lo is None or hi is None:
        return UNKNOWN
    if hi == lo:
        return 1.0
    return (hi - value) / (hi - lo)


def price_favorability(price: Decimal, stats: CategoryStats) -> float:
    """(max - p) / (max - min) over observed prices; 1.0 when all are equal."""
    if stats.max_price is None or stats.min_price is None or stats.max_price == stats.min_price:
        return 1.0
    return float((stats.max_price - price) / (stats.max_price - stats.min_price))


def trust_favorability(option: OptionBase) -> float:
    rating = option.rating
    if rating is None and isinstance(option, HotelOption):
        rating = option.star_rating
    if rating is None:
        return UNKNOWN
    return rating / 5.0


def capacity_favorability(capacity: int | None, headcount: int) -> float:
    if capacity is None:
        return UNKNOWN
    return min(capacity, headcount) / headcount


def _count_ratio(count: int, max_observed: int) -> float:
    if max_observed <= 0:
        return 0.0
    return count / max_observed


def favorabilities(option: OptionBase, stats: CategoryStats, headcount: int) -> dict[str, float]:
    """Favorability per criterion applicable to the option's category."""
    result = {
        "price_weight": price_favorability(option.unit_price, stats),
        "trust_weight": trust_favorability(option),
    }

    if isinstance(option, FlightOption):
        result["stops_weight"] = 1.0 / (1 + option.stops)
        result["duration_weight"] = _inverse_in_range(
            option.duration_minutes, stats.min_duration_minutes, stats.max_duration_minutes
        )
    elif isinstance(option, HotelOption):
        result["location_weight"] = _inverse_in_range(
            option.distance_km, stats.min_distance_km, stats.max_distance_km
        )
        result["amenities_weight"] = _count_ratio(len(option.amenities), stats.max_amenities)
    elif isinstance(option, MeetingRoomOption):
        result["capacity_weight"] = capacity_favorability(option.capacity, headcount)
        result["amenities_weight"] = _count_ratio(len(option.amenities), stats.max_amenities)
    elif isinstance(option, CateringOption):
        result["dietary_weight"] = _count_ratio(len(option.dietary_options), stats.max_dietary)
    elif isinstance(option, TransportOption):
        result["capacity_weight"] = capacity_favorability(option.capacity, headcount)

    return result


def category_score(
    category: Category,
    option: OptionBase,
    stats: CategoryStats,
    weights: Weights,
    headcount: int,
) -> float:
    """Blend of criterion favorabilities using normalized sub-weights."""
    fractions = normalize_fractions(weights.sub_weights(category))
    favor = favorabilities(option, stats, headcount)
    score = sum(fraction * favor[name] for name, fraction in fractions.items())
    return max(0.0, min(1.0, score))


def package_score(
    items: Mapping[Category, OptionBase],
    stats: Mapping[Category, CategoryStats],
    weights: Weights,
    headcount: int,
) -> tuple[float, dict[Category, float]]:
    """Importance-weighted package score over the categories present.

    Returns:
        (score in [0, 1], per-category scores)
    """
    per_category = {
        category: category_score(category, option, stats[category], weights, headcount)
        for category, option in items.items()
    }
    fractions = normalize_fractions({c: weights.importance(c) for c in items})
    score = sum(fractions[c] * s for c, s in per_category.items())
    return max(0.0, min(1.0, score)), per_category
