"""Models package - re-exports for convenience."""

from backend.app.models.booking import BookingRecord, ContactInfo, PaymentInfo
from backend.app.models.cart import Cart, CartAction, CartLineItem
from backend.app.models.common import (
    CATEGORY_ORDER,
    Category,
    DiscoveryState,
    QuantityBasis,
    quantize_money,
)
from backend.app.models.options import (
    CateringOption,
    CategoryOption,
    DiscoveryResult,
    FlightOption,
    HotelOption,
    MeetingRoomOption,
    OptionBase,
    ProviderPackage,
    TransportOption,
)
from backend.app.models.package import Package
from backend.app.models.trip import RequirementsDraft, TripRequirements
from backend.app.models.weights import CATEGORY_CRITERIA, Weights

__all__ = [
    # Common
    "Category",
    "CATEGORY_ORDER",
    "DiscoveryState",
    "QuantityBasis",
    "quantize_money",
    # Trip
    "TripRequirements",
    "RequirementsDraft",
    # Options
    "OptionBase",
    "CategoryOption",
    "FlightOption",
    "HotelOption",
    "MeetingRoomOption",
    "CateringOption",
    "TransportOption",
    "ProviderPackage",
    "DiscoveryResult",
    # Ranking
    "Weights",
    "CATEGORY_CRITERIA",
    "Package",
    # Cart
    "Cart",
    "CartLineItem",
    "CartAction",
    # Booking
    "BookingRecord",
    "ContactInfo",
    "PaymentInfo",
]
