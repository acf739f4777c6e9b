from __future__ import annotations

import secrets
from typing import Protocol

from tasklist.tasks.models import SessionState


class SessionBackend(Protocol):
    """Minimal pluggable session storage.

    Backends own expiry: a session that has not been saved within the TTL
    loads as None and the caller starts a fresh, empty state.
    """

    def load(self, session_id: str) -> SessionState | None:
        """Return the stored state, or None if unknown or expired."""

    def save(self, session_id: str, state: SessionState) -> None:
        """Store state and restart the session's expiry window."""

    def ping(self) -> bool:
        """Return True when the backend is reachable."""


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


__all__ = ["SessionBackend", "new_session_id"]
