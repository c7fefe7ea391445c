from src.storage.sessions import InMemorySessionStore, SessionStore

__all__ = ["InMemorySessionStore", "SessionStore"]
