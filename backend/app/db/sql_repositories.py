"""SQL implementations of repository interfaces."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.app.db.models import Booking
from backend.app.models.booking import BookingRecord, ContactInfo
from backend.app.models.cart import Cart


def _to_record(row: Booking) -> BookingRecord:
    return BookingRecord(
        booking_id=row.booking_id,
        confirmation_id=row.confirmation_id,
        session_id=row.session_id,
        contact=ContactInfo(name=row.contact_name, email=row.contact_email),
        payment_method=row.payment_method,
        payment_reference=row.payment_reference,
        cart=Cart.model_validate(row.cart_snapshot),
        status=row.status,
        created_at=row.created_at,
    )


class SqlBookingRepository:
    """SQL implementation of BookingRepository (async)."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, record: BookingRecord) -> None:
        """Insert a booking row with the cart snapshot as JSON."""
        booking = Booking(
            booking_id=record.booking_id,
            confirmation_id=record.confirmation_id,
            session_id=record.session_id,
            contact_name=record.contact.name,
            contact_email=record.contact.email,
            payment_method=record.payment_method,
            payment_reference=record.payment_reference,
            status=record.status,
            currency=record.cart.currency,
            total=record.cart.total,
            cart_snapshot=record.cart.model_dump(mode="json"),
            created_at=record.created_at,
        )

        async with self._session_factory() as session:
            session.add(booking)
            await session.commit()

    async def get(self, booking_id: str) -> BookingRecord | None:
        """Get booking by ID."""
        async with self._session_factory() as session:
            row = await session.get(Booking, booking_id)

        if row is None:
            return None
        return _to_record(row)

    async def list_for_session(self, session_id: str) -> list[BookingRecord]:
        """List bookings for a session, oldest first."""
        stmt = (
            select(Booking)
            .where(Booking.session_id == session_id)
            .order_by(Booking.created_at)
        )
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).scalars().all()

        return [_to_record(row) for row in rows]
