"""
Confirmation notifications.

In production, this would hand the payload to an email relay; message
templating is out of scope here. The logging notifier keeps a record of
everything it was asked to send so flows can be verified offline.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from src.schemas.museum_schema import MuseumBooking, SupportTicket

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send_support_ticket_confirmation(self, ticket: SupportTicket) -> None: ...

    def send_booking_confirmation(self, email: str, booking: MuseumBooking) -> None: ...


@dataclass
class SentNotification:
    kind: str
    recipient: str
    data: dict[str, Any] = field(default_factory=dict)


class LoggingNotifier:
    """Logs and records notifications instead of delivering them."""

    def __init__(self) -> None:
        self.sent: list[SentNotification] = []

    def send_support_ticket_confirmation(self, ticket: SupportTicket) -> None:
        self.sent.append(SentNotification(
            kind="support_ticket",
            recipient=ticket.email,
            data={
                "ticketId": ticket.ticket_id,
                "name": ticket.name,
                "issueType": ticket.issue_type,
                "description": ticket.description,
            },
        ))
        logger.info("Support ticket confirmation queued for %s (%s)", ticket.email, ticket.ticket_id)

    def send_booking_confirmation(self, email: str, booking: MuseumBooking) -> None:
        self.sent.append(SentNotification(
            kind="booking",
            recipient=email,
            data={
                "bookingId": booking.booking_id,
                "museumName": booking.museum_name,
                "date": booking.visit_date.isoformat(),
                "ticketCount": booking.ticket_count,
                "amount": booking.amount,
                "pdfUrl": booking.pdf_url,
            },
        ))
        logger.info("Booking confirmation queued for %s (%s)", email, booking.booking_id)
