"""Shared test fixtures and helpers."""

from datetime import date
from typing import Any, Optional

import pytest

from src.conversation.engine import ConversationEngine
from src.conversation.intents import IntentMatcher
from src.conversation.state_machine import FlowStateMachine
from src.schemas.museum_schema import Museum
from src.storage.sessions import InMemorySessionStore
from src.tools.booking import InMemoryBookingStore
from src.tools.catalog import InMemoryMuseumCatalog
from src.tools.notifications import LoggingNotifier
from src.tools.payments import GatewaySession
from src.tools.support import InMemorySupportTicketStore

TODAY = date(2030, 6, 14)


class StubResponder:
    """Records fallback calls and answers with a fixed text or error."""

    def __init__(self, reply: str = "We are open 10am to 5pm.", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def respond(self, message: str, context: dict[str, Any]) -> str:
        self.calls.append((message, context))
        if self.error is not None:
            raise self.error
        return self.reply


class StubGateway:
    """Checkout gateway double: records sessions, optionally fails."""

    def __init__(self, error: Optional[Exception] = None, payment_status: str = "paid"):
        self.error = error
        self.payment_status = payment_status
        self.created: list[dict[str, Any]] = []
        self._sessions: dict[str, GatewaySession] = {}

    def create_session(self, **kwargs) -> GatewaySession:
        if self.error is not None:
            raise self.error
        self.created.append(kwargs)
        session_id = f"cs_test_{len(self.created)}"
        session = GatewaySession(
            id=session_id,
            url=f"https://checkout.example/{session_id}",
            payment_status=self.payment_status,
            metadata=kwargs["metadata"],
        )
        self._sessions[session_id] = session
        return session

    def retrieve_session(self, session_id: str) -> GatewaySession:
        return self._sessions[session_id]


def make_museum(
    museum_id: str = "m-test",
    name: str = "Test Museum",
    price: float = 100,
    slug: Optional[str] = None,
    is_active: bool = True,
) -> Museum:
    """Helper to create a Museum with sensible defaults."""
    return Museum(
        id=museum_id,
        name=name,
        slug=slug or name.lower().replace(" ", "-"),
        price=price,
        is_active=is_active,
    )


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def state_machine():
    return FlowStateMachine()


@pytest.fixture
def intents():
    return IntentMatcher()


@pytest.fixture
def catalog():
    return InMemoryMuseumCatalog()


@pytest.fixture
def bookings():
    return InMemoryBookingStore()


@pytest.fixture
def tickets():
    return InMemorySupportTicketStore()


@pytest.fixture
def notifier():
    return LoggingNotifier()


@pytest.fixture
def responder():
    return StubResponder()


@pytest.fixture
def sessions():
    return InMemorySessionStore()


@pytest.fixture
def engine(catalog, bookings, tickets, responder, notifier, sessions):
    return ConversationEngine(
        catalog=catalog,
        bookings=bookings,
        tickets=tickets,
        responder=responder,
        notifier=notifier,
        sessions=sessions,
        clock=lambda: TODAY,
    )


def chat(engine: ConversationEngine, *messages: str, session_id: str = "sess-1", user_id=None):
    """Send messages in order and return every reply."""
    return [engine.send_message(session_id, m, user_id=user_id) for m in messages]
