"""Catalog, booking and support-ticket records."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TicketStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"


class Museum(BaseModel):
    """Catalog entry; read-only to the conversation engine."""
    id: str
    name: str
    slug: str
    description: str = ""
    location: str = "Bengaluru"
    price: float = Field(ge=0)
    image_url: str = ""
    is_active: bool = True


class MuseumBooking(BaseModel):
    """A ticket booking created when a visitor starts checkout."""
    booking_id: str
    user_id: str
    museum_id: str
    museum_name: str
    visit_date: date
    ticket_count: int = Field(ge=1)
    amount: float = Field(ge=0)
    payment_status: PaymentStatus = PaymentStatus.PENDING
    checkout_session_id: str = ""
    pdf_url: str = ""
    created_at: datetime = Field(default_factory=_utcnow)


class SupportTicket(BaseModel):
    """Support request collected by the chat support flow."""
    ticket_id: str
    user_id: Optional[str] = None
    name: str
    email: str
    issue_type: str = "General"
    description: str
    priority: Priority = Priority.MEDIUM
    status: TicketStatus = TicketStatus.OPEN
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
