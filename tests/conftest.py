from __future__ import annotations

import datetime as dt
import itertools
import os
from collections.abc import Callable

import pytest

from tasklist.observability import reset_metrics


class FakeClock:
    """Deterministic wall clock; each call returns the current instant."""

    def __init__(self, start: dt.datetime | None = None) -> None:
        self.now = start or dt.datetime(2024, 1, 1, 12, 0, tzinfo=dt.UTC)

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, seconds: float = 1.0) -> None:
        self.now = self.now + dt.timedelta(seconds=seconds)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def id_factory() -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"task-{next(counter)}"


@pytest.fixture(autouse=True)
def _fresh_metrics() -> None:
    reset_metrics()


def _redis_ping(url: str) -> bool:
    try:
        import redis

        return bool(redis.Redis.from_url(url).ping())
    except Exception:
        return False


@pytest.fixture(scope="session")
def redis_url() -> str:
    """Provide a reachable Redis URL or skip.

    Priority: REDIS_URL env, then localhost:6379.
    """
    for url in (os.getenv("REDIS_URL"), "redis://localhost:6379/0"):
        if url and _redis_ping(url):
            return url
    pytest.skip("Redis not available; set REDIS_URL or start local Redis")
