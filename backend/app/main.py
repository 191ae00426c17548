"""FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.app.api.routes.bookings import router as bookings_router
from backend.app.api.routes.cart import router as cart_router
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.api.routes.planner import router as planner_router
from backend.app.config import get_settings
from backend.app.db.engine import create_schema, get_async_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the booking table when a database is configured."""
    if get_settings().database_url:
        await create_schema(get_async_engine())
        logger.info("Booking schema ready")
    yield


app = FastAPI(title="Group Trip Planner API", version="0.1.0", lifespan=lifespan)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(planner_router)
app.include_router(cart_router)
app.include_router(bookings_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Group Trip Planner API", "version": "0.1.0"}
