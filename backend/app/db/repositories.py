"""Repository protocol interfaces for data access."""

from typing import Protocol

from backend.app.models.booking import BookingRecord


class BookingRepository(Protocol):
    """Repository for confirmed booking snapshots."""

    async def save(self, record: BookingRecord) -> None:
        """Persist a booking record.

        Args:
            record: Booking with its verbatim cart snapshot
        """
        ...

    async def get(self, booking_id: str) -> BookingRecord | None:
        """Get booking by ID.

        Args:
            booking_id: Master booking ID

        Returns:
            BookingRecord if found, None otherwise
        """
        ...

    async def list_for_session(self, session_id: str) -> list[BookingRecord]:
        """List bookings made from a session, oldest first."""
        ...
