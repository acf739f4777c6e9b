from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Literal

SessionBackendName = Literal["memory", "redis"]


@dataclass(slots=True)
class AppConfig:
    app_title: str
    session_backend: SessionBackendName
    redis_url: str
    session_key_prefix: str
    session_ttl_seconds: int
    session_cookie_name: str
    session_cookie_secure: bool
    host: str
    port: int


def _int_or(raw: str | None, default: int) -> int:
    value = (raw or "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _truthy(raw: str | None) -> bool:
    return (raw or "").strip().lower() in {"1", "true", "yes", "on"}


def _backend(raw: str | None) -> SessionBackendName:
    name = (raw or "").strip().lower()
    if name == "redis":
        return "redis"
    return "memory"


def load_config(env: dict[str, str] | None = None) -> AppConfig:
    e: dict[str, Any] = dict(os.environ)
    if env:
        e.update(env)
    ttl = max(1, _int_or(e.get("SESSION_TTL_SECONDS"), 86400))
    port = _int_or(e.get("TASKLIST_PORT"), 8000)
    if not 0 < port < 65536:
        port = 8000
    return AppConfig(
        app_title=(e.get("APP_TITLE") or "").strip() or "Todo List",
        session_backend=_backend(e.get("SESSION_BACKEND")),
        redis_url=e.get("REDIS_URL") or "redis://localhost:6379/0",
        session_key_prefix=(e.get("SESSION_KEY_PREFIX") or "tasklist").rstrip(":"),
        session_ttl_seconds=ttl,
        session_cookie_name=e.get("SESSION_COOKIE_NAME") or "tasklist_session",
        session_cookie_secure=_truthy(e.get("SESSION_COOKIE_SECURE")),
        host=e.get("TASKLIST_HOST") or "127.0.0.1",
        port=port,
    )


__all__ = ["AppConfig", "SessionBackendName", "load_config"]
