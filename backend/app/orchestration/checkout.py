"""Checkout - payment boundary and booking snapshot persistence."""

import logging
import secrets
import uuid
from datetime import UTC, datetime
from decimal import Decimal
from typing import Protocol

from backend.app.db.repositories import BookingRepository
from backend.app.errors import EmptyCartError
from backend.app.models.booking import BookingRecord, ContactInfo, PaymentInfo
from backend.app.models.cart import Cart

logger = logging.getLogger(__name__)


class PaymentGateway(Protocol):
    """Payment boundary; returns an authorization reference."""

    async def authorize(self, *, amount: Decimal, currency: str, payment: PaymentInfo) -> str:
        ...


class MockPaymentGateway:
    """Always-approving gateway; records authorizations for inspection."""

    def __init__(self) -> None:
        self.authorizations: list[tuple[Decimal, str, str]] = []

    async def authorize(self, *, amount: Decimal, currency: str, payment: PaymentInfo) -> str:
        reference = f"pay_mock_{uuid.uuid4().hex[:12]}"
        self.authorizations.append((amount, currency, payment.method))
        return reference


def new_confirmation_id() -> str:
    """Human-facing confirmation code, e.g. ``TD-3FA94C1B``."""
    return f"TD-{secrets.token_hex(4).upper()}"


async def checkout_cart(
    cart: Cart | None,
    *,
    contact: ContactInfo,
    payment: PaymentInfo,
    gateway: PaymentGateway,
    repository: BookingRepository,
) -> BookingRecord:
    """Authorize payment and persist the booking snapshot.

    Args:
        cart: Session's active cart (None when no cart was built)
        contact: Booking contact
        payment: Payment details for the gateway
        gateway: Payment boundary
        repository: Booking persistence port

    Returns:
        Saved BookingRecord

    Raises:
        EmptyCartError: If there is no cart or it has no line items
    """
    if cart is None or cart.is_empty:
        raise EmptyCartError("Cannot check out an empty cart")

    reference = await gateway.authorize(amount=cart.total, currency=cart.currency, payment=payment)

    record = BookingRecord(
        booking_id=f"bk_{uuid.uuid4().hex}",
        confirmation_id=new_confirmation_id(),
        session_id=cart.session_id,
        contact=contact,
        payment_method=payment.method,
        payment_reference=reference,
        cart=cart,
        created_at=datetime.now(UTC),
    )
    await repository.save(record)

    logger.info(
        f"Booking confirmed: {record.confirmation_id}",
        extra={
            "structured": {
                "booking_id": record.booking_id,
                "session_id": record.session_id,
                "total": str(cart.total),
                "lines": len(cart.items),
            }
        },
    )
    return record
