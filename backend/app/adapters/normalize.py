"""Normalize raw vendor payloads into tagged category options.

Vendors return loosely shaped JSON (camelCase or snake_case, price under one of
several keys). Everything downstream of this module works on the typed
variants in ``backend.app.models.options`` only.
"""

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from backend.app.models.common import Category
from backend.app.models.options import CategoryOption, OptionBase

logger = logging.getLogger(__name__)

_OPTION_ADAPTER: TypeAdapter[OptionBase] = TypeAdapter(CategoryOption)

# Checked in order; first present key wins
PRICE_KEYS = (
    "price",
    "unit_price",
    "pricePerNight",
    "price_per_night",
    "pricePerPerson",
    "price_per_person",
    "pricePerDay",
    "price_per_day",
    "estimatedPrice",
    "estimated_price",
    "flatRate",
    "flat_rate",
)

VENDOR_KEYS = ("vendor", "provider", "airline", "name", "seller")
ID_KEYS = ("option_id", "id", "offer_id", "external_id")
RATING_KEYS = ("rating", "guest_rating", "guestRating", "trust_score")

# Category-specific metadata: target field -> accepted source keys
_METADATA_KEYS: dict[Category, dict[str, tuple[str, ...]]] = {
    Category.flights: {
        "stops": ("stops",),
        "duration_minutes": ("duration_minutes", "durationMinutes"),
        "cabin_class": ("cabin_class", "cabinClass"),
        "flight_number": ("flight_number", "flightNumber"),
    },
    Category.hotels: {
        "star_rating": ("star_rating", "starRating", "stars"),
        "distance_km": ("distance_km", "distanceKm"),
        "room_type": ("room_type", "roomType"),
    },
    Category.meeting_rooms: {
        "capacity": ("capacity",),
        "venue_type": ("venue_type", "venueType"),
    },
    Category.catering: {
        "dietary_options": ("dietary_options", "dietaryOptions", "dietary"),
        "menu": ("menu", "menu_name"),
    },
    Category.transport: {
        "capacity": ("capacity", "seats"),
        "vehicle_type": ("vehicle_type", "vehicleType"),
    },
}


def _first(raw: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def _as_decimal(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Mapping):
        # Ride-hailing estimates come as {"min": .., "max": ..}
        low, high = _as_decimal(value.get("min")), _as_decimal(value.get("max"))
        if low is None or high is None:
            return low if high is None else high
        return (low + high) / 2
    try:
        return Decimal(str(value).replace(",", "").lstrip("$"))
    except InvalidOperation:
        return None


def _as_rating(value: Any) -> float | None:
    """Rating on a 0-5 scale; unparseable values ("N/A") are unknown."""
    if value is None or isinstance(value, bool):
        return None
    try:
        rating = float(value)
    except (TypeError, ValueError):
        return None
    if rating > 5:
        # Some vendors report 0-10 or 0-100 trust scores
        rating /= 20.0 if rating > 10 else 2.0
    return rating


def _as_strings(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    return tuple(str(v) for v in value if v not in (None, ""))


def _duration_from_text(value: Any) -> int | None:
    """Parse '5h 30m' style durations into minutes."""
    if not isinstance(value, str):
        return None
    hours = minutes = 0
    text = value.lower().replace(" ", "")
    if "h" in text:
        head, _, text = text.partition("h")
        hours = int(head) if head.isdigit() else 0
    text = text.rstrip("m")
    if text.isdigit():
        minutes = int(text)
    total = hours * 60 + minutes
    return total or None


def normalize_option(
    category: Category,
    raw: Mapping[str, Any],
    *,
    index: int,
    currency: str = "USD",
) -> OptionBase:
    """Normalize one raw vendor record.

    Args:
        category: Category the record was returned for
        raw: Raw vendor record
        index: Position in the vendor response (used for a fallback id)
        currency: Currency to assume when the vendor omits one

    Returns:
        Typed option variant for the category

    Raises:
        ValueError: If the record has no usable price or fails validation
    """
    price = _as_decimal(_first(raw, PRICE_KEYS))
    if price is None:
        raise ValueError(f"{category.value} option #{index} has no price")

    rating = _as_rating(_first(raw, RATING_KEYS))

    data: dict[str, Any] = {
        "category": category.value,
        "option_id": str(_first(raw, ID_KEYS) or f"{category.value}-{index}"),
        "vendor": str(_first(raw, VENDOR_KEYS) or "unknown"),
        "name": str(raw.get("name") or raw.get("title") or ""),
        "unit_price": price,
        "currency": str(raw.get("currency") or currency),
        "rating": rating,
        "amenities": _as_strings(raw.get("amenities")),
        "provider_score": _first(raw, ("provider_score", "score")),
    }
    for field, keys in _METADATA_KEYS[category].items():
        value = _first(raw, keys)
        if field == "dietary_options":
            value = _as_strings(value)
        if value is not None:
            data[field] = value

    if category == Category.flights and "duration_minutes" not in data:
        minutes = _duration_from_text(raw.get("duration"))
        if minutes is not None:
            data["duration_minutes"] = minutes
    if category == Category.hotels and data.get("rating") is None and "star_rating" in data:
        data["rating"] = data["star_rating"]

    try:
        return _OPTION_ADAPTER.validate_python(data)
    except PydanticValidationError as e:
        raise ValueError(f"{category.value} option #{index} is invalid: {e}") from e


def normalize_options(
    category: Category,
    raw_items: Iterable[Mapping[str, Any]],
    *,
    currency: str = "USD",
) -> list[OptionBase]:
    """Normalize a vendor response, dropping malformed records.

    Option ids are made unique within the category by suffixing duplicates.
    """
    options: list[OptionBase] = []
    seen: set[str] = set()
    for index, raw in enumerate(raw_items):
        try:
            option = normalize_option(category, raw, index=index, currency=currency)
        except (ValueError, TypeError) as e:
            logger.warning(f"Dropping {category.value} option: {e}")
            continue

        if option.option_id in seen:
            option = option.model_copy(update={"option_id": f"{option.option_id}-{index}"})
        seen.add(option.option_id)
        options.append(option)

    return options
