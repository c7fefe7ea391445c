"""
In-memory museum booking store.

In production, this would be the bookings collection of the document
database, written by the checkout flow and read by the dashboard.
"""

import logging
from typing import Optional, Protocol

from src.schemas.museum_schema import MuseumBooking, PaymentStatus

logger = logging.getLogger(__name__)


class BookingNotFoundError(LookupError):
    """No booking exists with the requested id."""


class BookingAccessError(PermissionError):
    """The booking exists but belongs to another user."""


class BookingStore(Protocol):
    def create(self, booking: MuseumBooking) -> MuseumBooking: ...

    def exists_booking_id(self, booking_id: str) -> bool: ...

    def get_by_booking_id(self, booking_id: str) -> Optional[MuseumBooking]: ...

    def get_by_checkout_session(self, session_id: str) -> Optional[MuseumBooking]: ...

    def list_for_user(self, user_id: str, limit: Optional[int] = None) -> list[MuseumBooking]: ...

    def latest_downloadable(self, user_id: str) -> Optional[MuseumBooking]: ...

    def save(self, booking: MuseumBooking) -> MuseumBooking: ...


class InMemoryBookingStore:
    """Dict-backed booking store keyed by booking id."""

    def __init__(self) -> None:
        self._bookings: dict[str, MuseumBooking] = {}

    def create(self, booking: MuseumBooking) -> MuseumBooking:
        if booking.booking_id in self._bookings:
            raise ValueError(f"Duplicate booking id: {booking.booking_id}")
        self._bookings[booking.booking_id] = booking.model_copy()
        logger.info(
            "Booking created: %s for %s on %s (%d tickets)",
            booking.booking_id, booking.museum_name, booking.visit_date, booking.ticket_count,
        )
        return booking.model_copy()

    def exists_booking_id(self, booking_id: str) -> bool:
        return booking_id in self._bookings

    def get_by_booking_id(self, booking_id: str) -> Optional[MuseumBooking]:
        booking = self._bookings.get(booking_id)
        return booking.model_copy() if booking else None

    def get_by_checkout_session(self, session_id: str) -> Optional[MuseumBooking]:
        for booking in self._bookings.values():
            if booking.checkout_session_id == session_id:
                return booking.model_copy()
        return None

    def list_for_user(self, user_id: str, limit: Optional[int] = None) -> list[MuseumBooking]:
        """Bookings of one user, newest first."""
        owned = sorted(
            (b for b in self._bookings.values() if b.user_id == user_id),
            key=lambda b: b.created_at,
            reverse=True,
        )
        if limit is not None:
            owned = owned[:limit]
        return [b.model_copy() for b in owned]

    def latest_downloadable(self, user_id: str) -> Optional[MuseumBooking]:
        """Most recent paid booking that already has a ticket PDF."""
        for booking in self.list_for_user(user_id):
            if booking.payment_status == PaymentStatus.PAID and booking.pdf_url:
                return booking
        return None

    def get_for_user(self, booking_id: str, user_id: str) -> MuseumBooking:
        """Fetch a booking the caller owns.

        Raises:
            BookingNotFoundError: unknown booking id.
            BookingAccessError: booking belongs to someone else.
        """
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        if booking.user_id != user_id:
            raise BookingAccessError(f"Booking {booking_id} does not belong to this user")
        return booking.model_copy()

    def save(self, booking: MuseumBooking) -> MuseumBooking:
        if booking.booking_id not in self._bookings:
            raise BookingNotFoundError(f"Booking {booking.booking_id} not found")
        self._bookings[booking.booking_id] = booking.model_copy()
        return booking.model_copy()
