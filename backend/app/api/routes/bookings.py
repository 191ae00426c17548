"""Checkout and booking lookup endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from backend.app.api.deps import get_planner_service, to_http_exception
from backend.app.errors import PlannerError
from backend.app.models.booking import BookingRecord, ContactInfo, PaymentInfo
from backend.app.orchestration.service import TripPlannerService

router = APIRouter(prefix="/api/v1", tags=["bookings"])

Service = Annotated[TripPlannerService, Depends(get_planner_service)]


class CheckoutRequest(BaseModel):
    """Request body for POST /checkout."""

    contact: ContactInfo
    payment: PaymentInfo = PaymentInfo()
    terms_accepted: bool = False


class CheckoutResponse(BaseModel):
    """Response for POST /checkout."""

    booking_id: str
    confirmation_id: str
    status: str


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    session_id: Annotated[str, Query(min_length=1)],
    request: CheckoutRequest,
    service: Service,
) -> CheckoutResponse:
    """Check out the session's cart.

    Raises:
        HTTPException: 400 if terms not accepted, 404 unknown session,
            409 empty cart
    """
    if not request.terms_accepted:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Terms and conditions must be accepted",
        )

    try:
        record = await service.checkout(session_id, request.contact, request.payment)
    except PlannerError as e:
        raise to_http_exception(e) from e

    return CheckoutResponse(
        booking_id=record.booking_id,
        confirmation_id=record.confirmation_id,
        status=record.status,
    )


@router.get("/bookings/{booking_id}", response_model=BookingRecord)
async def get_booking(booking_id: str, service: Service) -> BookingRecord:
    """Read a confirmed booking with its cart snapshot."""
    try:
        return await service.get_booking(booking_id)
    except PlannerError as e:
        raise to_http_exception(e) from e
