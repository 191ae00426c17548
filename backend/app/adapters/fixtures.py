"""Fixture-based vendor catalog for flights, hotels, venues, catering, and transport.

Records are vendor-shaped (camelCase, mixed price keys) so they exercise the
same normalization path as live integrations. Featured cities have curated
hotels and venues; any other destination gets a generic catalog whose prices
are scaled by a stable per-destination factor.
"""

import hashlib
from decimal import Decimal
from typing import Any

from backend.app.models.common import Category
from backend.app.models.trip import TripRequirements

FEATURED_HOTELS: dict[str, list[dict[str, Any]]] = {
    "las vegas": [
        {
            "id": "lv-h1",
            "name": "The Bellagio",
            "pricePerNight": 299,
            "stars": 5,
            "rating": 4.8,
            "distanceKm": 0.3,
            "amenities": ["Pool", "Spa", "Casino", "Fine Dining", "Fountain Views"],
        },
        {
            "id": "lv-h2",
            "name": "Caesars Palace",
            "pricePerNight": 249,
            "stars": 5,
            "rating": 4.7,
            "distanceKm": 0.1,
            "amenities": ["Pool Complex", "Spa", "Casino", "Shopping"],
        },
        {
            "id": "lv-h3",
            "name": "The LINQ Hotel",
            "pricePerNight": 129,
            "stars": 4,
            "rating": 4.3,
            "distanceKm": 0.1,
            "amenities": ["Pool", "High Roller Access", "Casino"],
        },
    ],
    "atlantic city": [
        {
            "id": "ac-h1",
            "name": "Borgata Hotel Casino & Spa",
            "pricePerNight": 219,
            "stars": 5,
            "rating": 4.7,
            "distanceKm": 4.8,
            "amenities": ["Spa", "Pool", "Casino", "Nightlife"],
        },
        {
            "id": "ac-h2",
            "name": "Hard Rock Hotel Atlantic City",
            "pricePerNight": 179,
            "stars": 4,
            "rating": 4.5,
            "distanceKm": 0.2,
            "amenities": ["Beach Access", "Pool", "Casino", "Live Music"],
        },
        {
            "id": "ac-h3",
            "name": "Ocean Casino Resort",
            "pricePerNight": 159,
            "stars": 4,
            "rating": 4.4,
            "distanceKm": 0.5,
            "amenities": ["Ocean Views", "Pool", "Casino", "Restaurants"],
        },
    ],
    "silicon valley": [
        {
            "id": "sv-h1",
            "name": "Rosewood Sand Hill",
            "pricePerNight": 599,
            "stars": 5,
            "rating": 4.9,
            "distanceKm": 8.0,
            "amenities": ["Spa", "Pool", "Fine Dining", "Garden Views"],
        },
        {
            "id": "sv-h2",
            "name": "The Westin Palo Alto",
            "pricePerNight": 289,
            "stars": 4,
            "rating": 4.5,
            "distanceKm": 1.0,
            "amenities": ["Fitness Center", "Restaurant", "Business Center"],
        },
        {
            "id": "sv-h3",
            "name": "Aloft Santa Clara",
            "pricePerNight": 169,
            "stars": 3,
            "rating": 4.2,
            "distanceKm": 3.2,
            "amenities": ["Pool", "Bar", "Free WiFi", "Pet Friendly"],
        },
    ],
}

FEATURED_VENUES: dict[str, list[dict[str, Any]]] = {
    "las vegas": [
        {
            "id": "lv-1",
            "name": "Las Vegas Convention Center",
            "pricePerDay": 25000,
            "capacity": 10000,
            "rating": 4.8,
            "venueType": "convention_center",
            "amenities": ["WiFi", "AV Equipment", "Catering", "Parking", "Breakout Rooms"],
        },
        {
            "id": "lv-2",
            "name": "The Venetian Expo",
            "pricePerDay": 18000,
            "capacity": 5000,
            "rating": 4.9,
            "venueType": "expo_hall",
            "amenities": ["WiFi", "AV Equipment", "Catering", "Valet Parking", "VIP Lounges"],
        },
        {
            "id": "lv-3",
            "name": "MGM Grand Conference Center",
            "pricePerDay": 15000,
            "capacity": 3000,
            "rating": 4.7,
            "venueType": "conference_center",
            "amenities": ["WiFi", "AV Equipment", "Catering", "Hotel Integration"],
        },
    ],
    "atlantic city": [
        {
            "id": "ac-1",
            "name": "Atlantic City Convention Center",
            "pricePerDay": 20000,
            "capacity": 8000,
            "rating": 4.6,
            "venueType": "convention_center",
            "amenities": ["WiFi", "AV Equipment", "Catering", "Parking", "Ocean Views"],
        },
        {
            "id": "ac-2",
            "name": "Borgata Event Center",
            "pricePerDay": 12000,
            "capacity": 2400,
            "rating": 4.7,
            "venueType": "event_center",
            "amenities": ["WiFi", "AV Equipment", "Catering"],
        },
        {
            "id": "ac-3",
            "name": "Hard Rock Hotel Conference Hall",
            "pricePerDay": 10000,
            "capacity": 1500,
            "rating": 4.5,
            "venueType": "conference_center",
            "amenities": ["WiFi", "AV Equipment", "Stage"],
        },
    ],
    "silicon valley": [
        {
            "id": "sv-1",
            "name": "San Jose McEnery Convention Center",
            "pricePerDay": 22000,
            "capacity": 7000,
            "rating": 4.6,
            "venueType": "convention_center",
            "amenities": ["WiFi", "AV Equipment", "Catering", "Parking"],
        },
        {
            "id": "sv-2",
            "name": "Computer History Museum",
            "pricePerDay": 8000,
            "capacity": 800,
            "rating": 4.8,
            "venueType": "museum",
            "amenities": ["WiFi", "AV Equipment", "Exhibits"],
        },
        {
            "id": "sv-3",
            "name": "Palo Alto Conference Center",
            "pricePerDay": 10000,
            "capacity": 1200,
            "rating": 4.4,
            "venueType": "conference_center",
            "amenities": ["WiFi", "AV Equipment", "Catering", "Breakout Rooms"],
        },
    ],
}

_GENERIC_HOTELS: list[dict[str, Any]] = [
    {
        "name": "Grand Central Hotel",
        "pricePerNight": 240,
        "stars": 5,
        "rating": 4.6,
        "distanceKm": 0.5,
        "amenities": ["Spa", "Pool", "Restaurant", "Business Center"],
    },
    {
        "name": "Harbor View Inn",
        "pricePerNight": 165,
        "stars": 4,
        "rating": 4.3,
        "distanceKm": 2.0,
        "amenities": ["Restaurant", "Free WiFi", "Fitness Center"],
    },
    {
        "name": "City Express Suites",
        "pricePerNight": 110,
        "stars": 3,
        "rating": 3.9,
        "distanceKm": 4.5,
        "amenities": ["Free WiFi", "Breakfast"],
    },
]

_GENERIC_VENUES: list[dict[str, Any]] = [
    {
        "name": "Downtown Conference Center",
        "pricePerDay": 6000,
        "capacity": 600,
        "rating": 4.5,
        "venueType": "conference_center",
        "amenities": ["WiFi", "AV Equipment", "Catering", "Breakout Rooms"],
    },
    {
        "name": "Riverside Loft",
        "pricePerDay": 2500,
        "capacity": 80,
        "rating": 4.7,
        "venueType": "loft",
        "amenities": ["WiFi", "Projector"],
    },
    {
        "name": "Innovation Hub Boardroom",
        "pricePerDay": 900,
        "capacity": 20,
        "rating": 4.2,
        "venueType": "boardroom",
        "amenities": ["WiFi", "Video Conferencing"],
    },
]

_FLIGHTS: list[dict[str, Any]] = [
    {
        "airline": "United Airlines",
        "flightNumber": "UA 1432",
        "price": 389,
        "duration": "4h 05m",
        "stops": 0,
        "cabinClass": "economy",
        "rating": 4.1,
    },
    {
        "airline": "Delta Air Lines",
        "flightNumber": "DL 877",
        "price": 342,
        "duration": "5h 40m",
        "stops": 1,
        "cabinClass": "economy",
        "rating": 4.4,
    },
    {
        "airline": "Southwest Airlines",
        "flightNumber": "WN 2210",
        "price": 249,
        "duration": "6h 55m",
        "stops": 1,
        "cabinClass": "economy",
        "rating": 4.0,
    },
    {
        "airline": "American Airlines",
        "flightNumber": "AA 65",
        "price": 1240,
        "duration": "4h 10m",
        "stops": 0,
        "cabinClass": "business",
        "rating": 4.2,
    },
]

_CATERING: list[dict[str, Any]] = [
    {
        "vendor": "Fresh Table Catering",
        "menu": "Farm-to-table lunch buffet",
        "pricePerPerson": 45,
        "rating": 4.7,
        "dietaryOptions": ["vegetarian", "vegan", "gluten_free"],
    },
    {
        "vendor": "Boxed Lunch Co.",
        "menu": "Boxed sandwiches and salads",
        "pricePerPerson": 22,
        "rating": 4.1,
        "dietaryOptions": ["vegetarian"],
    },
    {
        "vendor": "Saffron Events",
        "menu": "Three-course plated dinner",
        "pricePerPerson": 95,
        "rating": 4.9,
        "dietaryOptions": ["vegetarian", "vegan", "halal", "kosher", "gluten_free"],
    },
]

_TRANSPORT: list[dict[str, Any]] = [
    {
        "provider": "uber",
        "name": "UberXL",
        "vehicleType": "suv",
        "flatRate": 55,
        "capacity": 6,
        "rating": 4.5,
    },
    {
        "provider": "lyft",
        "name": "Lyft XL",
        "vehicleType": "suv",
        "flatRate": 50,
        "capacity": 6,
        "rating": 4.4,
    },
    {
        "provider": "Metro Charter",
        "name": "56-seat motor coach",
        "vehicleType": "coach",
        "flatRate": 1400,
        "capacity": 56,
        "rating": 4.6,
    },
]

_PRICE_KEYS = ("price", "pricePerNight", "pricePerDay", "pricePerPerson", "flatRate")


def destination_key(destination: str) -> str:
    """Lowercase, whitespace-collapsed lookup key for a destination."""
    return " ".join(destination.lower().split())


def price_factor(destination: str) -> Decimal:
    """Stable price multiplier between 0.85 and 1.30 for a destination."""
    digest = hashlib.sha256(destination_key(destination).encode()).digest()
    return Decimal(85 + digest[0] % 46) / Decimal(100)


def _scaled(records: list[dict[str, Any]], factor: Decimal, prefix: str) -> list[dict[str, Any]]:
    scaled = []
    for index, record in enumerate(records):
        item = dict(record)
        item.setdefault("id", f"{prefix}-{index + 1}")
        for key in _PRICE_KEYS:
            if key in item:
                item[key] = str((Decimal(item[key]) * factor).quantize(Decimal("1")))
        scaled.append(item)
    return scaled


def fetch_catalog(category: Category, destination: str) -> list[dict[str, Any]]:
    """Raw fixture records for one category at a destination.

    Args:
        category: Category to fetch
        destination: Free-form destination name

    Returns:
        Vendor-shaped records (fresh copies, safe to mutate)
    """
    key = destination_key(destination)
    slug = key.replace(" ", "-") or "any"

    if category == Category.hotels and key in FEATURED_HOTELS:
        return [dict(r) for r in FEATURED_HOTELS[key]]
    if category == Category.meeting_rooms and key in FEATURED_VENUES:
        return [dict(r) for r in FEATURED_VENUES[key]]

    factor = price_factor(destination)
    if category == Category.flights:
        return _scaled(_FLIGHTS, factor, f"{slug}-fl")
    if category == Category.hotels:
        return _scaled(_GENERIC_HOTELS, factor, f"{slug}-h")
    if category == Category.meeting_rooms:
        return _scaled(_GENERIC_VENUES, factor, f"{slug}-v")
    if category == Category.catering:
        return _scaled(_CATERING, factor, f"{slug}-c")
    return _scaled(_TRANSPORT, factor, f"{slug}-t")


class FixtureVendorProvider:
    """Provider serving the fixture catalog for the trip's destination."""

    def __init__(self, category: Category) -> None:
        self.category = category
        self.name = f"fixtures.{category.value}"

    async def fetch(
        self, requirements: TripRequirements, session_id: str
    ) -> list[dict[str, Any]]:
        return fetch_catalog(self.category, requirements.destination)
