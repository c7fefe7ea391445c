"""Reply text builders shared by the flows and informational intents."""

import json
from typing import Any

from src.config import settings
from src.schemas.museum_schema import Museum, MuseumBooking
from src.utils import format_amount, format_visit_date

GREETING_REPLY = (
    "Hello! 👋 How can I assist you today? "
    "You can book museum tickets or create a support ticket."
)
HELP_REPLY = (
    "I can help you:\n"
    "• Book museum tickets\n"
    "• View your bookings\n"
    "• Download tickets\n"
    "• Create support tickets\n"
    "• Answer questions\n\n"
    "What would you like to do?"
)
FALLBACK_REPLY = (
    "I can help you book museum tickets, view your bookings, "
    "or create a support ticket. What would you like to do?"
)


def price_label(price: float) -> str:
    return f"{settings.catalog.currency_symbol}{format_amount(price)}"


def build_museum_lines(museums: list[Museum]) -> str:
    """Numbered museum list with the per-ticket price."""
    return "".join(
        f"{i}. {m.name} - {price_label(m.price)}/ticket\n" for i, m in enumerate(museums, start=1)
    )


def build_museum_prompt(lead: str, museums: list[Museum], *, ask_selection: bool = True) -> str:
    """Ask the visitor to pick a museum; never blocks on an empty catalog."""
    if not museums:
        return f"{lead} Currently, there are no museums available."
    text = f"{lead} Here are the available museums:\n\n{build_museum_lines(museums)}"
    if ask_selection:
        text += "\nPlease select a museum by name or number."
    return text


def build_booking_summary(
    museum_name: str, visit_date, ticket_count: int, amount: float
) -> str:
    plural = "s" if ticket_count > 1 else ""
    return (
        f"You are booking {ticket_count} ticket{plural} for {museum_name}. "
        f"Visit date: {format_visit_date(visit_date)}. "
        f"Total: {price_label(amount)}. Should I proceed to payment?"
    )


def build_booking_list(bookings: list[MuseumBooking]) -> str:
    lines = [f"You have {len(bookings)} booking(s):\n"]
    for i, b in enumerate(bookings, start=1):
        lines.append(
            f"{i}. {b.museum_name} - {b.visit_date.strftime('%d/%m/%Y')} "
            f"({b.ticket_count} tickets, {price_label(b.amount)})"
        )
        lines.append(f"   Booking ID: {b.booking_id}\n")
    lines.append("Visit your dashboard to download tickets or view all bookings.")
    return "\n".join(lines)


def build_fallback_context(context: dict[str, Any]) -> str:
    """Session summary appended to the fallback model prompt."""
    return f"Current session context: {json.dumps(context)}"
