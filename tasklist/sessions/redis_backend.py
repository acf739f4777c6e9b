from __future__ import annotations

from typing import cast

import redis
from pydantic import ValidationError as ModelValidationError

from tasklist.tasks.models import SessionState

from .interface import SessionBackend


class RedisSessionBackend(SessionBackend):
    """Redis-backed session storage.

    Data structures:
    - String per session: key `{prefix}:session:{id}` holding the state JSON,
      written with `EX ttl` so Redis expires idle sessions itself
    """

    def __init__(self, *, url: str, key_prefix: str = "tasklist", ttl_seconds: int = 86400) -> None:
        self._redis: redis.Redis = redis.Redis.from_url(url)
        self._prefix = key_prefix.rstrip(":")
        self._ttl = max(1, int(ttl_seconds))

    def _session_key(self, session_id: str) -> str:
        return f"{self._prefix}:session:{session_id}"

    def load(self, session_id: str) -> SessionState | None:
        raw = cast(bytes | None, self._redis.get(self._session_key(session_id)))
        if raw is None:
            return None
        try:
            return SessionState.model_validate_json(raw)
        except ModelValidationError:
            # Unreadable payloads are dropped and the session starts over
            self.discard(session_id)
            return None

    def save(self, session_id: str, state: SessionState) -> None:
        self._redis.set(self._session_key(session_id), state.model_dump_json(), ex=self._ttl)

    def discard(self, session_id: str) -> None:
        self._redis.delete(self._session_key(session_id))

    def ping(self) -> bool:
        try:
            return bool(self._redis.ping())
        except redis.exceptions.RedisError:
            return False


__all__ = ["RedisSessionBackend"]
