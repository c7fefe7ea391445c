"""
Chat session persistence.

In production, sessions live in the document database keyed by the
client's session token. The in-memory store hands out copies, so a caller
always performs a read-modify-write and concurrent writers to the same
session race unless they hold ``lock(session_id)``.
"""

import copy
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional, Protocol

from src.schemas.session_schema import ConversationSession

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    def get(self, session_id: str) -> Optional[ConversationSession]: ...

    def save(self, session: ConversationSession) -> None: ...

    def lock(self, session_id: str): ...


class InMemorySessionStore:
    """Dict-backed session store with one lock per session token."""

    def __init__(self) -> None:
        # Neither sessions nor their locks are ever evicted. Stale-session
        # collection is not implemented.
        self._sessions: dict[str, ConversationSession] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def get(self, session_id: str) -> Optional[ConversationSession]:
        session = self._sessions.get(session_id)
        return copy.deepcopy(session) if session else None

    def save(self, session: ConversationSession) -> None:
        session.updated_at = datetime.now(timezone.utc)
        self._sessions[session.session_id] = copy.deepcopy(session)

    @contextmanager
    def lock(self, session_id: str) -> Iterator[None]:
        """Serialize read-modify-write cycles on one session."""
        with self._locks_guard:
            lock = self._locks.setdefault(session_id, threading.Lock())
        with lock:
            yield

    def __len__(self) -> int:
        return len(self._sessions)

    def reset(self) -> None:
        """Drop all sessions. Used by test fixtures for isolation."""
        self._sessions.clear()
        self._locks.clear()
