"""
Per-session conversation state.

Each booking and support step is its own frozen variant carrying only the
fields that are valid at that step, so a ticket count can never be present
while the visitor is still choosing a museum. A session holds at most one
active flow variant at a time.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, Union

from src.schemas.conversation_schema import ChatTurn, Sender


class FlowStep(str, Enum):
    """Step tags for both sub-flows."""
    # Booking
    MUSEUM = "museum"
    DATE = "date"
    TICKETS = "tickets"
    CONFIRM = "confirm"
    # Support ticket
    NAME = "name"
    EMAIL = "email"
    ISSUE_TYPE = "issueType"
    DESCRIPTION = "description"
    PRIORITY = "priority"


# --------------------------------------------------------------------- #
# Booking variants
# --------------------------------------------------------------------- #

@dataclass(frozen=True)
class ChoosingMuseum:
    step = FlowStep.MUSEUM


@dataclass(frozen=True)
class ChoosingDate:
    museum_id: str
    museum_name: str
    step = FlowStep.DATE


@dataclass(frozen=True)
class ChoosingTickets:
    museum_id: str
    museum_name: str
    visit_date: date
    step = FlowStep.TICKETS


@dataclass(frozen=True)
class ConfirmingBooking:
    museum_id: str
    museum_name: str
    visit_date: date
    ticket_count: int
    amount: float
    step = FlowStep.CONFIRM


BookingState = Union[ChoosingMuseum, ChoosingDate, ChoosingTickets, ConfirmingBooking]
BOOKING_STATES = (ChoosingMuseum, ChoosingDate, ChoosingTickets, ConfirmingBooking)


# --------------------------------------------------------------------- #
# Support-ticket variants
# --------------------------------------------------------------------- #

@dataclass(frozen=True)
class AskingName:
    step = FlowStep.NAME


@dataclass(frozen=True)
class AskingEmail:
    name: str
    step = FlowStep.EMAIL


@dataclass(frozen=True)
class AskingIssueType:
    name: str
    email: str
    step = FlowStep.ISSUE_TYPE


@dataclass(frozen=True)
class AskingDescription:
    name: str
    email: str
    issue_type: str
    step = FlowStep.DESCRIPTION


@dataclass(frozen=True)
class AskingPriority:
    name: str
    email: str
    issue_type: str
    description: str
    step = FlowStep.PRIORITY


SupportState = Union[AskingName, AskingEmail, AskingIssueType, AskingDescription, AskingPriority]
SUPPORT_STATES = (AskingName, AskingEmail, AskingIssueType, AskingDescription, AskingPriority)

FlowState = Union[BookingState, SupportState]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ConversationSession:
    """
    Persisted chat session keyed by an opaque client token.

    Created lazily on the first message and mutated in place on every
    turn. ``flow`` is the single active sub-flow, or None when idle.
    ``caller_id`` is the visitor behind the message being handled; it is
    replaced on every call and is what reads and writes are scoped to.
    """
    session_id: str
    user_id: Optional[str] = None
    turns: list[ChatTurn] = field(default_factory=list)
    flow: Optional[FlowState] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    caller_id: Optional[str] = None

    @property
    def booking(self) -> Optional[BookingState]:
        return self.flow if isinstance(self.flow, BOOKING_STATES) else None

    @property
    def support(self) -> Optional[SupportState]:
        return self.flow if isinstance(self.flow, SUPPORT_STATES) else None

    def has_active_flow(self) -> bool:
        return self.flow is not None

    def reset_flows(self) -> None:
        self.flow = None

    def add_turn(self, sender: Sender, text: str) -> None:
        self.turns.append(ChatTurn(sender=sender, text=text))
