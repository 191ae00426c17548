"""API dependencies - planner service wiring and domain error mapping."""

import logging
from functools import lru_cache

from fastapi import HTTPException, status

from backend.app.adapters.fixtures import FixtureVendorProvider
from backend.app.adapters.vendors import HttpVendorProvider, VendorProvider
from backend.app.config import Settings, get_settings
from backend.app.db.engine import create_session_factory, get_async_engine
from backend.app.db.inmemory import InMemoryBookingRepository
from backend.app.db.repositories import BookingRepository
from backend.app.db.sql_repositories import SqlBookingRepository
from backend.app.errors import (
    BookingNotFoundError,
    EmptyCartError,
    NotReadyError,
    PackageNotFoundError,
    PlannerError,
    SessionNotFoundError,
    UnknownCategoryError,
    ValidationError,
)
from backend.app.llm.client import get_requirements_extractor
from backend.app.models.common import CATEGORY_ORDER, Category
from backend.app.orchestration.checkout import MockPaymentGateway
from backend.app.orchestration.service import TripPlannerService
from backend.app.tools.executor import ProviderCallConfig, ProviderExecutor
from backend.app.utils.logging import StructuredProviderLogger
from backend.app.utils.metrics import PrometheusProviderMetrics

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[PlannerError], int]] = [
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (SessionNotFoundError, status.HTTP_404_NOT_FOUND),
    (PackageNotFoundError, status.HTTP_404_NOT_FOUND),
    (BookingNotFoundError, status.HTTP_404_NOT_FOUND),
    (UnknownCategoryError, status.HTTP_404_NOT_FOUND),
    (NotReadyError, status.HTTP_409_CONFLICT),
    (EmptyCartError, status.HTTP_409_CONFLICT),
]


def to_http_exception(exc: PlannerError) -> HTTPException:
    """Map a domain error to the HTTPException returned to clients."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def build_providers(settings: Settings) -> dict[Category, VendorProvider]:
    """HTTP providers when a vendor integration is configured, fixtures otherwise."""
    if settings.vendor_api_base_url:
        api_key = settings.vendor_api_key.get_secret_value() if settings.vendor_api_key else None
        return {
            category: HttpVendorProvider(
                category,
                settings.vendor_api_base_url,
                api_key=api_key,
                timeout_s=settings.provider_timeout_ms / 1000,
            )
            for category in CATEGORY_ORDER
        }
    logger.warning("No vendor API configured, serving the fixture catalog")
    return {category: FixtureVendorProvider(category) for category in CATEGORY_ORDER}


def build_booking_repository(settings: Settings) -> BookingRepository:
    if settings.database_url:
        return SqlBookingRepository(create_session_factory(get_async_engine()))
    return InMemoryBookingRepository()


def create_planner_service(settings: Settings) -> TripPlannerService:
    """Wire a planner service from settings."""
    executor = ProviderExecutor(
        ProviderCallConfig.from_settings(settings),
        metrics=PrometheusProviderMetrics(),
        logger=StructuredProviderLogger(),
    )
    return TripPlannerService(
        settings=settings,
        providers=build_providers(settings),
        executor=executor,
        extractor=get_requirements_extractor(settings),
        repository=build_booking_repository(settings),
        gateway=MockPaymentGateway(),
    )


@lru_cache
def get_planner_service() -> TripPlannerService:
    """FastAPI dependency: process-wide planner service."""
    return create_planner_service(get_settings())
