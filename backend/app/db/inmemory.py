"""In-memory implementations of repository interfaces."""

from backend.app.models.booking import BookingRecord


class InMemoryBookingRepository:
    """In-memory implementation of BookingRepository."""

    def __init__(self) -> None:
        self._bookings: dict[str, BookingRecord] = {}

    async def save(self, record: BookingRecord) -> None:
        """Save a booking record."""
        self._bookings[record.booking_id] = record

    async def get(self, booking_id: str) -> BookingRecord | None:
        """Get booking by ID."""
        return self._bookings.get(booking_id)

    async def list_for_session(self, session_id: str) -> list[BookingRecord]:
        """List bookings for a session, oldest first."""
        records = [r for r in self._bookings.values() if r.session_id == session_id]
        return sorted(records, key=lambda r: r.created_at)
