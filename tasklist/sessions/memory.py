from __future__ import annotations

import threading
import time
from collections.abc import Callable

from tasklist.tasks.models import SessionState

from .interface import SessionBackend


class InMemorySessionBackend(SessionBackend):
    """Thread-safe in-process session storage with sliding expiry.

    - each save stores a deep copy and stamps `expires_at = now + ttl`
    - expired entries are dropped lazily on load and on save
    """

    def __init__(
        self, *, ttl_seconds: int = 86400, clock: Callable[[], float] | None = None
    ) -> None:
        self._ttl = max(1, int(ttl_seconds))
        self._clock = clock or time.monotonic
        self._sessions: dict[str, tuple[float, SessionState]] = {}
        self._lock = threading.RLock()

    def _purge_expired(self, now: float) -> None:
        stale = [sid for sid, (exp, _) in self._sessions.items() if exp <= now]
        for sid in stale:
            del self._sessions[sid]

    def load(self, session_id: str) -> SessionState | None:
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            expires_at, state = entry
            if expires_at <= self._clock():
                del self._sessions[session_id]
                return None
            return state.model_copy(deep=True)

    def save(self, session_id: str, state: SessionState) -> None:
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            self._sessions[session_id] = (now + self._ttl, state.model_copy(deep=True))

    def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


__all__ = ["InMemorySessionBackend"]
