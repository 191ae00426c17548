"""Cart endpoints - build from a package, modify lines, read back."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from backend.app.api.deps import get_planner_service, to_http_exception
from backend.app.errors import PlannerError
from backend.app.models.cart import Cart, CartAction
from backend.app.orchestration.service import TripPlannerService

router = APIRouter(prefix="/api/v1/cart", tags=["cart"])

Service = Annotated[TripPlannerService, Depends(get_planner_service)]


@router.post("/build", response_model=Cart)
async def build_cart(
    session_id: Annotated[str, Query(min_length=1)],
    package_id: Annotated[str, Query(min_length=1)],
    service: Service,
) -> Cart:
    """Build the session's cart from a package in the latest ranking."""
    try:
        return await service.build_cart(session_id, package_id)
    except PlannerError as e:
        raise to_http_exception(e) from e


@router.post("/modify", response_model=Cart)
async def modify_cart(
    session_id: Annotated[str, Query(min_length=1)],
    action: CartAction,
    service: Service,
) -> Cart:
    """Update a line quantity or remove a category."""
    try:
        return await service.modify_cart(session_id, action)
    except PlannerError as e:
        raise to_http_exception(e) from e


@router.get("", response_model=Cart)
async def get_cart(session_id: Annotated[str, Query(min_length=1)], service: Service) -> Cart:
    """Current cart for the session."""
    try:
        return service.get_cart(session_id)
    except PlannerError as e:
        raise to_http_exception(e) from e
