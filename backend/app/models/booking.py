"""Booking models - checkout input and the persisted booking snapshot."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from backend.app.models.cart import Cart


class ContactInfo(BaseModel):
    """Primary contact for the group booking."""

    name: str = Field(..., min_length=1)
    email: EmailStr


class PaymentInfo(BaseModel):
    """Payment details passed through to the (mocked) payment gateway."""

    method: str = "stripe"
    stripe_token: str | None = None


class BookingRecord(BaseModel):
    """Confirmed booking with a verbatim snapshot of the final cart."""

    booking_id: str
    confirmation_id: str
    session_id: str
    contact: ContactInfo
    payment_method: str
    payment_reference: str
    cart: Cart
    status: str = "confirmed"
    created_at: datetime
