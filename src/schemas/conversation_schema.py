"""Chat transcript and reply envelope schemas."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class Sender(str, Enum):
    USER = "user"
    BOT = "bot"


class NextAction(str, Enum):
    """Hint telling the calling UI what to render after a reply."""

    GREETING = "GREETING"
    ASK_MUSEUM = "ASK_MUSEUM"
    ASK_DATE = "ASK_DATE"
    ASK_TICKETS = "ASK_TICKETS"
    CONFIRM_BOOKING = "CONFIRM_BOOKING"
    TRIGGER_PAYMENT = "TRIGGER_PAYMENT"
    ASK_SUPPORT_NAME = "ASK_SUPPORT_NAME"
    ASK_SUPPORT_EMAIL = "ASK_SUPPORT_EMAIL"
    ASK_SUPPORT_ISSUE_TYPE = "ASK_SUPPORT_ISSUE_TYPE"
    ASK_SUPPORT_DESCRIPTION = "ASK_SUPPORT_DESCRIPTION"
    ASK_SUPPORT_PRIORITY = "ASK_SUPPORT_PRIORITY"
    SUPPORT_TICKET_CREATED = "SUPPORT_TICKET_CREATED"
    SHOW_BOOKINGS = "SHOW_BOOKINGS"
    DOWNLOAD_TICKET = "DOWNLOAD_TICKET"
    SHOW_MUSEUMS = "SHOW_MUSEUMS"
    HELP = "HELP"
    AI_RESPONSE = "AI_RESPONSE"


class ChatTurn(BaseModel):
    """A single message in a session transcript."""

    sender: Sender
    text: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ChatReply(BaseModel):
    """Result of one send_message call."""

    reply: str
    next_action: Optional[NextAction] = None
    payload: Optional[dict[str, Any]] = None
