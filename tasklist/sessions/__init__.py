from .interface import SessionBackend, new_session_id
from .manager import Session, SessionManager
from .memory import InMemorySessionBackend

__all__ = [
    "InMemorySessionBackend",
    "Session",
    "SessionBackend",
    "SessionManager",
    "new_session_id",
]
