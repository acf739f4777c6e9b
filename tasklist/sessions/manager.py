from __future__ import annotations

import threading
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass

from tasklist.observability import get_json_logger, get_metrics
from tasklist.tasks.errors import ValidationError
from tasklist.tasks.models import SessionState
from tasklist.tasks.store import Clock, IdFactory, TaskListStore

from .interface import SessionBackend, new_session_id


@dataclass(slots=True)
class Session:
    """One opened session: its id, its store and whether it was persisted."""

    id: str
    store: TaskListStore
    created: bool
    saved: bool = False


class SessionManager:
    """Load, mutate and save one session's task list under a per-session lock.

    Locks are reference counted so idle sessions do not leave entries behind.
    Ids the backend does not know are never adopted: a fresh id is minted
    instead, so a client cannot choose the key its state is stored under.
    """

    def __init__(
        self,
        backend: SessionBackend,
        *,
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
    ) -> None:
        self.backend = backend
        self._clock = clock
        self._id_factory = id_factory
        self._guard = threading.Lock()
        self._locks: dict[str, tuple[threading.Lock, int]] = {}
        self._logger = get_json_logger("tasklist.sessions")

    def _acquire(self, session_id: str) -> threading.Lock:
        with self._guard:
            lock, users = self._locks.get(session_id, (threading.Lock(), 0))
            self._locks[session_id] = (lock, users + 1)
        lock.acquire()
        return lock

    def _release(self, session_id: str, lock: threading.Lock) -> None:
        lock.release()
        with self._guard:
            _, users = self._locks[session_id]
            if users <= 1:
                del self._locks[session_id]
            else:
                self._locks[session_id] = (lock, users - 1)

    def _persist(self, session: Session) -> None:
        # A brand-new session is only written once it holds something
        if session.created and session.store.state == SessionState():
            return
        self.backend.save(session.id, session.store.state)
        session.saved = True
        if session.created:
            self._logger.info("session created", extra={"event": "session_created"})
            get_metrics().increment("sessions_created")

    @contextmanager
    def open(self, session_id: str | None) -> Generator[Session, None, None]:
        """Yield the session and persist its state when the block exits.

        Known sessions are saved on every exit, which restarts their expiry
        window. State is also saved when the block raises `ValidationError`,
        since a rejected edit still leaves edit mode. Other errors discard
        changes.
        """
        lock_id = session_id or new_session_id()
        lock = self._acquire(lock_id)
        try:
            state = self.backend.load(session_id) if session_id else None
            if state is None:
                sid = lock_id if session_id is None else new_session_id()
                session = Session(sid, self._store(SessionState()), created=True)
            else:
                session = Session(lock_id, self._store(state), created=False)
            try:
                yield session
            except ValidationError:
                self._persist(session)
                raise
            self._persist(session)
        finally:
            self._release(lock_id, lock)

    def _store(self, state: SessionState) -> TaskListStore:
        return TaskListStore(state, clock=self._clock, id_factory=self._id_factory)

    def active_locks(self) -> int:
        with self._guard:
            return len(self._locks)


__all__ = ["Session", "SessionManager"]
