"""Shared pytest fixtures for all test suites."""

import os
from collections.abc import AsyncGenerator, Callable
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from backend.app.adapters.normalize import normalize_options
from backend.app.adapters.vendors import StaticVendorProvider, VendorProvider
from backend.app.config import Settings
from backend.app.db.inmemory import InMemoryBookingRepository
from backend.app.db.models import Base
from backend.app.llm.client import RuleBasedExtractor
from backend.app.models.common import Category
from backend.app.models.options import DiscoveryResult
from backend.app.models.trip import TripRequirements
from backend.app.orchestration.checkout import MockPaymentGateway
from backend.app.orchestration.service import TripPlannerService
from backend.app.tools.executor import ProviderCallConfig, ProviderExecutor

TODAY = date(2026, 3, 2)


async def no_sleep(_: float) -> None:
    return None


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment."""
    return Settings(_env_file=None, database_url=None, vendor_api_base_url=None, openai_api_key=None)


@pytest.fixture
def requirements() -> TripRequirements:
    """Three-night Austin offsite for 15 people."""
    return TripRequirements(
        destination="Austin",
        start_date=date(2026, 4, 14),
        end_date=date(2026, 4, 17),
        headcount=15,
        budget=Decimal("50000"),
    )


@pytest.fixture
def raw_catalog() -> dict[Category, list[dict[str, Any]]]:
    """Vendor-shaped records for every category."""
    return {
        Category.flights: [
            {"id": "fl-1", "airline": "United", "price": 300, "stops": 0, "rating": 4.2,
             "durationMinutes": 210},
            {"id": "fl-2", "airline": "Delta", "price": 260, "stops": 1, "rating": 4.4,
             "durationMinutes": 320},
        ],
        Category.hotels: [
            {"id": "h-1", "name": "Driskill", "pricePerNight": 240, "rating": 4.6,
             "distanceKm": 0.4, "amenities": ["Spa", "Bar"]},
            {"id": "h-2", "name": "Hyatt Place", "pricePerNight": 160, "rating": 4.1,
             "distanceKm": 2.5, "amenities": ["Breakfast"]},
        ],
        Category.meeting_rooms: [
            {"id": "v-1", "name": "Capital Factory", "pricePerDay": 1800, "capacity": 40,
             "rating": 4.5, "amenities": ["WiFi", "AV Equipment"]},
        ],
        Category.catering: [
            {"id": "c-1", "vendor": "Tacodeli", "pricePerPerson": 28, "rating": 4.8,
             "dietaryOptions": ["vegetarian", "vegan"]},
        ],
        Category.transport: [
            {"id": "t-1", "provider": "Metro Charter", "flatRate": 900, "capacity": 20,
             "rating": 4.3},
        ],
    }


@pytest.fixture
def discovery(raw_catalog: dict[Category, list[dict[str, Any]]]) -> DiscoveryResult:
    """DiscoveryResult built from the raw catalog."""
    return DiscoveryResult(
        session_id="sess_test",
        headcount=15,
        options={c: normalize_options(c, records) for c, records in raw_catalog.items()},
    )


@pytest.fixture
def static_providers(
    raw_catalog: dict[Category, list[dict[str, Any]]],
) -> dict[Category, VendorProvider]:
    return {c: StaticVendorProvider(c, records) for c, records in raw_catalog.items()}


@pytest.fixture
def executor() -> ProviderExecutor:
    """Fast executor: 200ms timeout, one retry, no real sleeping."""
    config = ProviderCallConfig(
        hard_timeout_ms=200,
        retry_count=1,
        retry_jitter_min_ms=200,
        retry_jitter_max_ms=500,
    )
    return ProviderExecutor(config, sleep_fn=no_sleep)


@pytest.fixture
def make_service(
    settings: Settings,
    static_providers: dict[Category, VendorProvider],
    executor: ProviderExecutor,
) -> Callable[..., TripPlannerService]:
    """Factory for planner services; keyword arguments override collaborators."""

    def _make(**overrides: Any) -> TripPlannerService:
        kwargs: dict[str, Any] = {
            "settings": settings,
            "providers": static_providers,
            "executor": executor,
            "extractor": RuleBasedExtractor(),
            "repository": InMemoryBookingRepository(),
            "gateway": MockPaymentGateway(),
            "today": lambda: TODAY,
        }
        kwargs.update(overrides)
        return TripPlannerService(**kwargs)

    return _make


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine with the booking schema created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}",
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def postgres_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create async engine for PostgreSQL integration tests.

    Requires POSTGRES_TEST_URL to point at a disposable PostgreSQL database.
    Tests using this fixture should be marked with @pytest.mark.postgres.
    """
    database_url = os.getenv("POSTGRES_TEST_URL")
    if not database_url:
        pytest.skip("POSTGRES_TEST_URL not set - skipping postgres test")

    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    engine = create_async_engine(database_url, poolclass=NullPool, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()
