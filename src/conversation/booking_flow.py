"""
Booking sub-flow: museum -> date -> tickets -> confirm -> payment.

Each step is a session variant (see ``src.schemas.session_schema``) and
every move is checked against ``FlowStateMachine``. Bad input re-prompts
in place; the flow ends either by emitting ``TRIGGER_PAYMENT`` (the
caller starts checkout) or by cancellation.
"""

from datetime import date
from typing import Callable, Optional

from src.config import settings
from src.conversation.intents import IntentMatcher
from src.conversation.parsing import extract_ticket_count, is_valid_future_date, parse_date
from src.conversation.state_machine import FlowStateMachine, FlowTrigger
from src.logging_context import get_session_logger
from src.prompts.reply_templates import build_booking_summary, build_museum_prompt
from src.schemas.conversation_schema import ChatReply, NextAction
from src.schemas.museum_schema import Museum
from src.schemas.session_schema import (
    ChoosingDate,
    ChoosingMuseum,
    ChoosingTickets,
    ConfirmingBooking,
    ConversationSession,
    FlowStep,
)
from src.tools.catalog import MuseumCatalog, match_museum
from src.utils import format_visit_date

logger = get_session_logger(__name__)

BOOKING_CANCELLED_REPLY = "Booking cancelled. How else can I help you?"


class BookingFlow:
    """Drives one session through the booking steps."""

    def __init__(
        self,
        catalog: MuseumCatalog,
        state_machine: FlowStateMachine,
        intents: IntentMatcher,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._catalog = catalog
        self._sm = state_machine
        self._intents = intents
        self._clock = clock

    def handle(self, session: ConversationSession, message: str) -> ChatReply:
        current = session.booking
        step = current.step if current is not None else None

        # Explicit booking phrases restart only from idle or confirm; mid-flow
        # they are treated as answers to the current question.
        if step in (None, FlowStep.CONFIRM) and self._intents.wants_booking(message):
            return self._start(session)

        if isinstance(current, ChoosingMuseum):
            return self._select_museum(session, message)
        if isinstance(current, ChoosingDate):
            return self._choose_date(session, current, message)
        if isinstance(current, ChoosingTickets):
            return self._choose_tickets(session, current, message)
        if isinstance(current, ConfirmingBooking):
            return self._confirm(session, current, message)
        return self._start(session)

    def cancel(self, session: ConversationSession) -> ChatReply:
        session.flow = self._sm.apply(session.flow, FlowTrigger.CANCELLED, None)
        logger.info("Booking flow cancelled")
        return ChatReply(reply=BOOKING_CANCELLED_REPLY, next_action=None)

    # ------------------------------------------------------------------ #
    # Steps
    # ------------------------------------------------------------------ #

    def _start(self, session: ConversationSession) -> ChatReply:
        listing = self._listing()
        session.flow = self._sm.apply(session.flow, FlowTrigger.START_BOOKING, ChoosingMuseum())
        return ChatReply(
            reply=self._museum_prompt("Sure! Which museum would you like to visit?", listing),
            next_action=NextAction.ASK_MUSEUM,
        )

    def _select_museum(self, session: ConversationSession, message: str) -> ChatReply:
        listing = self._listing()
        museum = match_museum(message, self._all_active(), listing)
        if museum is None:
            session.flow = self._sm.apply(
                session.flow, FlowTrigger.MUSEUM_NOT_MATCHED, ChoosingMuseum()
            )
            logger.debug("No museum matched %r", message)
            return ChatReply(
                reply=self._museum_prompt(
                    "I couldn't find that museum.", listing, ask_selection=False
                ),
                next_action=NextAction.ASK_MUSEUM,
            )

        session.flow = self._sm.apply(
            session.flow,
            FlowTrigger.MUSEUM_SELECTED,
            ChoosingDate(museum_id=museum.id, museum_name=museum.name),
        )
        return ChatReply(
            reply=f"Great choice! {museum.name}. What date would you like to visit?",
            next_action=NextAction.ASK_DATE,
            payload={"museumId": museum.id, "museumName": museum.name},
        )

    def _choose_date(
        self, session: ConversationSession, current: ChoosingDate, message: str
    ) -> ChatReply:
        if self._intents.wants_go_back(message):
            session.flow = self._sm.apply(session.flow, FlowTrigger.GO_BACK, ChoosingMuseum())
            return ChatReply(
                reply=self._museum_prompt("Which museum would you like to visit?", self._listing()),
                next_action=NextAction.ASK_MUSEUM,
            )

        today = self._clock()
        visit_date = parse_date(message, today=today)
        if not is_valid_future_date(visit_date, today=today):
            session.flow = self._sm.apply(session.flow, FlowTrigger.DATE_REJECTED, current)
            logger.debug("Rejected visit date input %r", message)
            return ChatReply(
                reply="Please provide a valid future date (e.g., YYYY-MM-DD, DD-MM-YYYY, or 'tomorrow').",
                next_action=NextAction.ASK_DATE,
            )

        session.flow = self._sm.apply(
            session.flow,
            FlowTrigger.DATE_ACCEPTED,
            ChoosingTickets(
                museum_id=current.museum_id,
                museum_name=current.museum_name,
                visit_date=visit_date,
            ),
        )
        return ChatReply(
            reply=f"Nice! {format_visit_date(visit_date)}. How many tickets do you need?",
            next_action=NextAction.ASK_TICKETS,
            payload={
                "museumId": current.museum_id,
                "museumName": current.museum_name,
                "date": visit_date.isoformat(),
                "ticketCount": None,
                "amount": None,
            },
        )

    def _choose_tickets(
        self, session: ConversationSession, current: ChoosingTickets, message: str
    ) -> ChatReply:
        if self._intents.wants_go_back(message):
            session.flow = self._sm.apply(
                session.flow,
                FlowTrigger.GO_BACK,
                ChoosingDate(museum_id=current.museum_id, museum_name=current.museum_name),
            )
            return ChatReply(
                reply=f"What date would you like to visit {current.museum_name}?",
                next_action=NextAction.ASK_DATE,
                payload={"museumId": current.museum_id, "museumName": current.museum_name},
            )

        max_count = settings.chat.max_ticket_count
        ticket_count = extract_ticket_count(message, max_count=max_count)
        if not ticket_count:
            session.flow = self._sm.apply(session.flow, FlowTrigger.TICKETS_REJECTED, current)
            return ChatReply(
                reply=f"Please enter a valid number of tickets (1-{max_count}).",
                next_action=NextAction.ASK_TICKETS,
            )

        try:
            museum = self._catalog.get(current.museum_id)
        except Exception:
            logger.exception("Catalog lookup failed for %s", current.museum_id)
            session.flow = self._sm.apply(session.flow, FlowTrigger.TICKETS_REJECTED, current)
            return ChatReply(
                reply="Sorry, I encountered an error. Please try again.",
                next_action=NextAction.ASK_TICKETS,
            )

        if museum is None:
            session.flow = self._sm.apply(session.flow, FlowTrigger.MUSEUM_MISSING, None)
            logger.warning("Museum %s disappeared mid-booking", current.museum_id)
            return ChatReply(reply="Museum not found. Please start over.", next_action=None)

        amount = ticket_count * museum.price
        session.flow = self._sm.apply(
            session.flow,
            FlowTrigger.TICKETS_ACCEPTED,
            ConfirmingBooking(
                museum_id=current.museum_id,
                museum_name=current.museum_name,
                visit_date=current.visit_date,
                ticket_count=ticket_count,
                amount=amount,
            ),
        )
        return ChatReply(
            reply=build_booking_summary(current.museum_name, current.visit_date, ticket_count, amount),
            next_action=NextAction.CONFIRM_BOOKING,
            payload={
                "museumId": current.museum_id,
                "museumName": current.museum_name,
                "date": current.visit_date.isoformat(),
                "ticketCount": ticket_count,
                "amount": amount,
            },
        )

    def _confirm(
        self, session: ConversationSession, current: ConfirmingBooking, message: str
    ) -> ChatReply:
        if self._intents.wants_go_back(message):
            session.flow = self._sm.apply(
                session.flow,
                FlowTrigger.GO_BACK,
                ChoosingTickets(
                    museum_id=current.museum_id,
                    museum_name=current.museum_name,
                    visit_date=current.visit_date,
                ),
            )
            return ChatReply(
                reply=f"How many tickets do you need for {current.museum_name}?",
                next_action=NextAction.ASK_TICKETS,
                payload={
                    "museumId": current.museum_id,
                    "museumName": current.museum_name,
                    "date": current.visit_date.isoformat(),
                },
            )

        if self._intents.is_confirmation(message):
            session.flow = self._sm.apply(session.flow, FlowTrigger.PAYMENT_TRIGGERED, None)
            logger.info(
                "Payment triggered: %s x%d = %s", current.museum_name, current.ticket_count, current.amount
            )
            return ChatReply(
                reply="Redirecting to payment…",
                next_action=NextAction.TRIGGER_PAYMENT,
                payload={
                    "museumId": current.museum_id,
                    "date": current.visit_date.isoformat(),
                    "ticketCount": current.ticket_count,
                    "amount": current.amount,
                },
            )

        if self._intents.wants_cancel(message):
            return self.cancel(session)

        session.flow = self._sm.apply(session.flow, FlowTrigger.CONFIRMATION_UNCLEAR, current)
        return ChatReply(
            reply="Please type 'yes' to proceed with payment, or 'cancel' to cancel the booking.",
            next_action=NextAction.CONFIRM_BOOKING,
        )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _listing(self) -> Optional[list[Museum]]:
        """Museums shown to the visitor, or None if the catalog is unreachable."""
        try:
            return self._catalog.list_active(settings.catalog.listing_limit)
        except Exception:
            logger.exception("Could not list museums")
            return None

    def _all_active(self) -> list[Museum]:
        try:
            return self._catalog.list_active()
        except Exception:
            logger.exception("Could not load museums for matching")
            return []

    @staticmethod
    def _museum_prompt(
        lead: str, listing: Optional[list[Museum]], *, ask_selection: bool = True
    ) -> str:
        if listing is None:
            return f"{lead} Please choose from the available museums."
        return build_museum_prompt(lead, listing, ask_selection=ask_selection)
