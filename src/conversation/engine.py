"""
Conversation flow engine.

One call per visitor message: load (or lazily create) the session, pick
exactly one rule from an ordered list, let it produce the reply and move
the session's flow, then persist the session.

Rule order is fixed and first match wins:

    greeting -> cancel -> booking -> support -> my bookings ->
    download ticket -> museum list -> help -> fallback

Greeting comes first because it resets any in-progress flow. Booking and
support each claim the message either by vocabulary or because their flow
is already active; the two flows never run at the same time.
"""

import contextlib
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Optional

from src.config import settings
from src.conversation.booking_flow import BookingFlow
from src.conversation.intents import IntentMatcher
from src.conversation.state_machine import FlowStateMachine, FlowTrigger
from src.conversation.support_flow import SupportFlow
from src.llm.fallback import FallbackResponder, FallbackUnavailableError, clip_reply
from src.logging_context import get_session_logger, set_session_id
from src.prompts.reply_templates import (
    FALLBACK_REPLY,
    GREETING_REPLY,
    HELP_REPLY,
    build_booking_list,
    build_museum_lines,
)
from src.schemas.conversation_schema import ChatReply, NextAction, Sender
from src.schemas.session_schema import ConversationSession
from src.storage.sessions import InMemorySessionStore, SessionStore
from src.tools.booking import BookingStore
from src.tools.catalog import MuseumCatalog
from src.tools.notifications import Notifier
from src.tools.support import SupportTicketStore

logger = get_session_logger(__name__)

Handler = Callable[[ConversationSession, str], ChatReply]
Predicate = Callable[[ConversationSession, str], bool]


@dataclass(frozen=True)
class Rule:
    """One intent rule: when ``predicate`` holds, ``handler`` answers."""
    name: str
    predicate: Predicate
    handler: Handler


class ConversationEngine:
    """Rule-based museum ticket assistant."""

    def __init__(
        self,
        catalog: MuseumCatalog,
        bookings: BookingStore,
        tickets: SupportTicketStore,
        responder: FallbackResponder,
        notifier: Notifier,
        sessions: Optional[SessionStore] = None,
        clock: Optional[Callable[[], date]] = None,
    ) -> None:
        self._catalog = catalog
        self._bookings = bookings
        self._responder = responder
        self._sessions = sessions if sessions is not None else InMemorySessionStore()
        self._intents = IntentMatcher()
        self._sm = FlowStateMachine()
        self._booking_flow = BookingFlow(
            catalog, self._sm, self._intents, clock=clock or date.today
        )
        self._support_flow = SupportFlow(tickets, notifier, self._sm)
        self.rules: list[Rule] = self._build_rules()

    def _build_rules(self) -> list[Rule]:
        i = self._intents
        return [
            Rule("greeting", lambda s, m: i.is_greeting(m), self._greet),
            Rule("cancel", lambda s, m: s.has_active_flow() and i.wants_cancel(m), self._cancel),
            Rule(
                "booking",
                lambda s, m: s.booking is not None or (s.support is None and i.wants_booking(m)),
                self._booking_flow.handle,
            ),
            Rule(
                "support",
                lambda s, m: s.support is not None or (s.booking is None and i.wants_support_ticket(m)),
                self._support_flow.handle,
            ),
            Rule("my_bookings", lambda s, m: i.wants_my_bookings(m), self._show_bookings),
            Rule("download_ticket", lambda s, m: i.wants_download_ticket(m), self._download_ticket),
            Rule("museum_list", lambda s, m: i.wants_museum_list(m), self._show_museums),
            Rule("help", lambda s, m: i.wants_help(m), self._help),
            Rule("fallback", lambda s, m: True, self._fallback),
        ]

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def classify(self, session: ConversationSession, message: str) -> Rule:
        """Return the first rule that claims the message. No side effects."""
        for rule in self.rules:
            if rule.predicate(session, message):
                return rule
        raise RuntimeError("No rule matched; the fallback rule must be last")

    def send_message(
        self, session_id: str, message: str, user_id: Optional[str] = None
    ) -> ChatReply:
        """
        Handle one visitor message and return the reply.

        Args:
            session_id: Opaque client token identifying the conversation.
            message: Raw visitor text.
            user_id: Authenticated visitor, if any. Scopes this message's
                bookings and tickets; the first one seen also links the session.

        Raises:
            ValueError: If the session id or message is empty.
        """
        if not session_id or not message or not message.strip():
            raise ValueError("Session ID and message are required")

        set_session_id(session_id)
        guard = (
            self._sessions.lock(session_id)
            if settings.chat.serialize_sessions
            else contextlib.nullcontext()
        )
        with guard:
            session = self._sessions.get(session_id)
            if session is None:
                session = ConversationSession(session_id=session_id, user_id=user_id)
                logger.info("New chat session")
            elif user_id and not session.user_id:
                session.user_id = user_id
            session.caller_id = user_id

            session.add_turn(Sender.USER, message)
            rule = self.classify(session, message)
            logger.debug("Rule matched: %s", rule.name)
            reply = rule.handler(session, message)
            session.add_turn(Sender.BOT, reply.reply)
            self._sessions.save(session)

        return reply

    def get_session(self, session_id: str) -> Optional[ConversationSession]:
        return self._sessions.get(session_id)

    # ------------------------------------------------------------------ #
    # Global rules
    # ------------------------------------------------------------------ #

    def _greet(self, session: ConversationSession, message: str) -> ChatReply:
        session.flow = self._sm.apply(session.flow, FlowTrigger.GREETING_RESET, None)
        return ChatReply(reply=GREETING_REPLY, next_action=NextAction.GREETING)

    def _cancel(self, session: ConversationSession, message: str) -> ChatReply:
        if session.support is not None:
            return self._support_flow.cancel(session)
        return self._booking_flow.cancel(session)

    # ------------------------------------------------------------------ #
    # Informational rules
    # ------------------------------------------------------------------ #

    def _show_bookings(self, session: ConversationSession, message: str) -> ChatReply:
        if not session.caller_id:
            return ChatReply(
                reply="Please login to view your bookings. Visit the dashboard after logging in.",
            )
        try:
            bookings = self._bookings.list_for_user(session.caller_id, settings.chat.bookings_shown)
        except Exception:
            logger.exception("Could not fetch bookings for %s", session.caller_id)
            return ChatReply(
                reply="Sorry, I couldn't fetch your bookings right now. Please try again later.",
            )
        if not bookings:
            return ChatReply(reply="You don't have any bookings yet. Would you like to book tickets?")
        return ChatReply(reply=build_booking_list(bookings), next_action=NextAction.SHOW_BOOKINGS)

    def _download_ticket(self, session: ConversationSession, message: str) -> ChatReply:
        if not session.caller_id:
            return ChatReply(reply="Please login to download your tickets.")
        try:
            booking = self._bookings.latest_downloadable(session.caller_id)
        except Exception:
            logger.exception("Could not look up tickets for %s", session.caller_id)
            return ChatReply(reply="Sorry, I couldn't find your tickets. Please try again later.")
        if booking is None:
            return ChatReply(
                reply="No downloadable tickets found. Book tickets first or check if your payment is complete.",
            )
        return ChatReply(
            reply=(
                f"Your latest ticket for {booking.museum_name} is ready! Visit your dashboard "
                f"or booking history to download the PDF. Booking ID: {booking.booking_id}"
            ),
            next_action=NextAction.DOWNLOAD_TICKET,
            payload={"bookingId": booking.booking_id, "pdfUrl": booking.pdf_url},
        )

    def _show_museums(self, session: ConversationSession, message: str) -> ChatReply:
        try:
            museums = self._catalog.list_active(settings.catalog.listing_limit)
        except Exception:
            logger.exception("Could not fetch the museum list")
            return ChatReply(reply="Sorry, I couldn't fetch the museum list. Please try again.")
        if not museums:
            return ChatReply(
                reply="No museums available at the moment.", next_action=NextAction.SHOW_MUSEUMS
            )
        reply = (
            f"Available museums in {settings.catalog.city}:\n\n"
            f"{build_museum_lines(museums)}"
            "\nWould you like to book tickets for any of these?"
        )
        return ChatReply(reply=reply, next_action=NextAction.SHOW_MUSEUMS)

    def _help(self, session: ConversationSession, message: str) -> ChatReply:
        return ChatReply(reply=HELP_REPLY, next_action=NextAction.HELP)

    # ------------------------------------------------------------------ #
    # Fallback
    # ------------------------------------------------------------------ #

    def _fallback(self, session: ConversationSession, message: str) -> ChatReply:
        booking = session.booking
        context: dict[str, Any] = {
            "bookingStep": booking.step.value if booking is not None else None,
            "hasActiveBooking": booking is not None,
        }
        try:
            text = self._responder.respond(message, context)
        except FallbackUnavailableError:
            text = FALLBACK_REPLY
        except Exception:
            logger.exception("Fallback responder failed")
            text = FALLBACK_REPLY
        if not text or not text.strip():
            text = FALLBACK_REPLY
        return ChatReply(reply=clip_reply(text), next_action=NextAction.AI_RESPONSE)
