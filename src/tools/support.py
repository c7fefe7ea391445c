"""
In-memory support ticket store.

In production, this would be the support-ticket collection that the admin
panel triages.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from src.schemas.museum_schema import SupportTicket, TicketStatus

logger = logging.getLogger(__name__)


class SupportTicketStore(Protocol):
    def create(self, ticket: SupportTicket) -> SupportTicket: ...

    def exists_ticket_id(self, ticket_id: str) -> bool: ...

    def get(self, ticket_id: str) -> Optional[SupportTicket]: ...


class InMemorySupportTicketStore:
    """Dict-backed ticket store keyed by ticket id."""

    def __init__(self) -> None:
        self._tickets: dict[str, SupportTicket] = {}

    def create(self, ticket: SupportTicket) -> SupportTicket:
        if ticket.ticket_id in self._tickets:
            raise ValueError(f"Duplicate ticket id: {ticket.ticket_id}")
        self._tickets[ticket.ticket_id] = ticket.model_copy()
        logger.info("Support ticket created: %s (%s)", ticket.ticket_id, ticket.priority.value)
        return ticket.model_copy()

    def exists_ticket_id(self, ticket_id: str) -> bool:
        return ticket_id in self._tickets

    def get(self, ticket_id: str) -> Optional[SupportTicket]:
        ticket = self._tickets.get(ticket_id)
        return ticket.model_copy() if ticket else None

    def list_for_user(self, user_id: str) -> list[SupportTicket]:
        """Tickets raised by one user, newest first."""
        owned = [t for t in self._tickets.values() if t.user_id == user_id]
        owned.sort(key=lambda t: t.created_at, reverse=True)
        return [t.model_copy() for t in owned]

    def update_status(self, ticket_id: str, status: TicketStatus) -> SupportTicket:
        """Move a ticket through Open -> In Progress -> Resolved."""
        ticket = self._tickets.get(ticket_id)
        if ticket is None:
            raise LookupError(f"Support ticket {ticket_id} not found")
        updated = ticket.model_copy(
            update={"status": status, "updated_at": datetime.now(timezone.utc)}
        )
        self._tickets[ticket_id] = updated
        logger.info("Support ticket %s -> %s", ticket_id, status.value)
        return updated.model_copy()
