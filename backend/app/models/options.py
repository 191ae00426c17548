"""Vendor option models - one tagged variant per category."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from backend.app.models.common import Category


class OptionBase(BaseModel):
    """Fields every vendor offering carries."""

    model_config = ConfigDict(frozen=True)

    option_id: str
    vendor: str
    name: str = ""
    unit_price: Annotated[Decimal, Field(ge=0)]
    currency: str = "USD"
    rating: Annotated[float | None, Field(ge=0, le=5)] = None
    amenities: tuple[str, ...] = ()
    provider_score: float | None = None


class FlightOption(OptionBase):
    """Per-person airfare."""

    category: Literal["flights"] = "flights"
    stops: Annotated[int, Field(ge=0)] = 0
    duration_minutes: int | None = None
    cabin_class: str = "economy"
    flight_number: str | None = None


class HotelOption(OptionBase):
    """Group room block, priced per night."""

    category: Literal["hotels"] = "hotels"
    star_rating: Annotated[float | None, Field(ge=0, le=5)] = None
    distance_km: Annotated[float | None, Field(ge=0)] = None
    room_type: str | None = None


class MeetingRoomOption(OptionBase):
    """Meeting room or venue rental, priced per day."""

    category: Literal["meeting_rooms"] = "meeting_rooms"
    capacity: int | None = None
    venue_type: str | None = None


class CateringOption(OptionBase):
    """Catering, priced per person."""

    category: Literal["catering"] = "catering"
    dietary_options: tuple[str, ...] = ()
    menu: str | None = None


class TransportOption(OptionBase):
    """Ground transport, priced per booking."""

    category: Literal["transport"] = "transport"
    capacity: int | None = None
    vehicle_type: str | None = None


CategoryOption = Annotated[
    Union[FlightOption, HotelOption, MeetingRoomOption, CateringOption, TransportOption],
    Field(discriminator="category"),
]

OPTION_MODELS: dict[Category, type[OptionBase]] = {
    Category.flights: FlightOption,
    Category.hotels: HotelOption,
    Category.meeting_rooms: MeetingRoomOption,
    Category.catering: CateringOption,
    Category.transport: TransportOption,
}


class ProviderPackage(BaseModel):
    """Package pre-assembled and scored by an external ranking provider."""

    model_config = ConfigDict(frozen=True)

    package_id: str
    items: dict[Category, str]
    score: float | None = None


class DiscoveryResult(BaseModel):
    """Discovered options for one session, keyed by category."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    headcount: Annotated[int, Field(gt=0)]
    options: dict[Category, list[CategoryOption]] = Field(default_factory=dict)
    failures: dict[Category, str] = Field(default_factory=dict)
    provider_packages: list[ProviderPackage] = Field(default_factory=list)
    discovered_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def options_for(self, category: Category) -> list[OptionBase]:
        """Options for a category in discovery order (empty when none)."""
        return list(self.options.get(category, []))

    def find_option(self, category: Category, option_id: str) -> OptionBase | None:
        """Look up an option by id within a category."""
        for option in self.options.get(category, []):
            if option.option_id == option_id:
                return option
        return None

    @property
    def is_empty(self) -> bool:
        """True when no category returned any option."""
        return not any(self.options.values())
