"""
Support-ticket sub-flow: name -> email -> issue type -> description -> priority.

Linear with no back-navigation. Only the email and priority steps validate
their input; everything else is accepted as typed.
"""

from src.conversation.state_machine import FlowStateMachine, FlowTrigger
from src.logging_context import get_session_logger
from src.schemas.conversation_schema import ChatReply, NextAction
from src.schemas.museum_schema import Priority, SupportTicket
from src.schemas.session_schema import (
    AskingDescription,
    AskingEmail,
    AskingIssueType,
    AskingName,
    AskingPriority,
    ConversationSession,
)
from src.tools.identifiers import generate_ticket_id, generate_unique_id
from src.tools.notifications import Notifier
from src.tools.support import SupportTicketStore
from src.utils import is_valid_email

logger = get_session_logger(__name__)

SUPPORT_CANCELLED_REPLY = "Support ticket creation cancelled. How else can I help you?"


def normalize_priority(value: str) -> str:
    """'hIGH ' -> 'High'."""
    value = value.strip()
    return value[:1].upper() + value[1:].lower()


class SupportFlow:
    """Collects the fields of a support ticket one message at a time."""

    def __init__(
        self,
        tickets: SupportTicketStore,
        notifier: Notifier,
        state_machine: FlowStateMachine,
    ) -> None:
        self._tickets = tickets
        self._notifier = notifier
        self._sm = state_machine

    def handle(self, session: ConversationSession, message: str) -> ChatReply:
        current = session.support
        text = message.strip()

        if current is None:
            session.flow = self._sm.apply(session.flow, FlowTrigger.START_SUPPORT, AskingName())
            logger.info("Support ticket flow started")
            return ChatReply(
                reply="I'll help you create a support ticket. What's your name?",
                next_action=NextAction.ASK_SUPPORT_NAME,
            )

        if isinstance(current, AskingName):
            session.flow = self._sm.apply(
                session.flow, FlowTrigger.NAME_GIVEN, AskingEmail(name=text)
            )
            return ChatReply(
                reply=f"Thank you, {text}. What's your email address?",
                next_action=NextAction.ASK_SUPPORT_EMAIL,
            )

        if isinstance(current, AskingEmail):
            if not is_valid_email(text):
                session.flow = self._sm.apply(session.flow, FlowTrigger.EMAIL_REJECTED, current)
                return ChatReply(
                    reply="Please provide a valid email address.",
                    next_action=NextAction.ASK_SUPPORT_EMAIL,
                )
            session.flow = self._sm.apply(
                session.flow,
                FlowTrigger.EMAIL_ACCEPTED,
                AskingIssueType(name=current.name, email=text),
            )
            return ChatReply(
                reply="What type of issue is this? (e.g., Booking Issue, Payment Problem, General Inquiry)",
                next_action=NextAction.ASK_SUPPORT_ISSUE_TYPE,
            )

        if isinstance(current, AskingIssueType):
            session.flow = self._sm.apply(
                session.flow,
                FlowTrigger.ISSUE_TYPE_GIVEN,
                AskingDescription(name=current.name, email=current.email, issue_type=text),
            )
            return ChatReply(
                reply="Please describe your issue in detail:",
                next_action=NextAction.ASK_SUPPORT_DESCRIPTION,
            )

        if isinstance(current, AskingDescription):
            session.flow = self._sm.apply(
                session.flow,
                FlowTrigger.DESCRIPTION_GIVEN,
                AskingPriority(
                    name=current.name,
                    email=current.email,
                    issue_type=current.issue_type,
                    description=text,
                ),
            )
            return ChatReply(
                reply="What's the priority? (Low, Medium, High)",
                next_action=NextAction.ASK_SUPPORT_PRIORITY,
            )

        return self._finish(session, current, text)

    def cancel(self, session: ConversationSession) -> ChatReply:
        session.flow = self._sm.apply(session.flow, FlowTrigger.CANCELLED, None)
        logger.info("Support ticket flow cancelled")
        return ChatReply(reply=SUPPORT_CANCELLED_REPLY, next_action=None)

    def _finish(
        self, session: ConversationSession, current: AskingPriority, text: str
    ) -> ChatReply:
        try:
            priority = Priority(normalize_priority(text))
        except ValueError:
            session.flow = self._sm.apply(session.flow, FlowTrigger.PRIORITY_REJECTED, current)
            return ChatReply(
                reply="Please choose Low, Medium, or High.",
                next_action=NextAction.ASK_SUPPORT_PRIORITY,
            )

        ticket_id = generate_unique_id(generate_ticket_id, self._tickets.exists_ticket_id)
        ticket = self._tickets.create(SupportTicket(
            ticket_id=ticket_id,
            user_id=session.caller_id,
            name=current.name,
            email=current.email,
            issue_type=current.issue_type,
            description=current.description,
            priority=priority,
        ))

        try:
            self._notifier.send_support_ticket_confirmation(ticket)
        except Exception:
            logger.exception("Confirmation for support ticket %s could not be sent", ticket_id)

        session.flow = self._sm.apply(session.flow, FlowTrigger.TICKET_CREATED, None)
        return ChatReply(
            reply=(
                "Your support ticket has been created successfully! "
                f"Your ticket ID is: {ticket_id}. We'll get back to you soon."
            ),
            next_action=NextAction.SUPPORT_TICKET_CREATED,
            payload={"ticketId": ticket_id},
        )
