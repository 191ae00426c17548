"""Common types and enums shared across all models."""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

CENT = Decimal("0.01")


class Category(str, Enum):
    """Vendor offering category.

    Declaration order is the canonical category order.
    """

    flights = "flights"
    hotels = "hotels"
    meeting_rooms = "meeting_rooms"
    catering = "catering"
    transport = "transport"

    @classmethod
    def _missing_(cls, value: object) -> "Category | None":
        """Resolve singular and vendor aliases (e.g. 'hotel', 'venues')."""
        if not isinstance(value, str):
            return None
        key = value.strip().lower().replace("-", "_").replace(" ", "_")
        alias = _CATEGORY_ALIASES.get(key)
        if alias is not None:
            return cls(alias)
        for member in cls:
            if member.value == key:
                return member
        return None


_CATEGORY_ALIASES: dict[str, str] = {
    "flight": "flights",
    "hotel": "hotels",
    "lodging": "hotels",
    "meeting_room": "meeting_rooms",
    "venue": "meeting_rooms",
    "venues": "meeting_rooms",
    "meal": "catering",
    "meals": "catering",
    "ground_transport": "transport",
    "transit": "transport",
}

CATEGORY_ORDER: tuple[Category, ...] = tuple(Category)


class QuantityBasis(str, Enum):
    """How a cart line quantity is derived from the trip."""

    per_person = "per_person"
    per_night = "per_night"
    per_day = "per_day"
    per_booking = "per_booking"


class DiscoveryState(str, Enum):
    """Discovery lifecycle for a session."""

    pending = "pending"
    running = "running"
    complete = "complete"


def quantize_money(value: Decimal) -> Decimal:
    """Round a currency amount to cents (half up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
