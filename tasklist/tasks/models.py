from __future__ import annotations

import datetime as _dt

from pydantic import BaseModel, Field


class Task(BaseModel):
    """A single to-do entry.

    - `text` is stored already HTML-escaped
    - `updated_at` is unset until the first successful edit
    """

    id: str
    text: str
    completed: bool = False
    created_at: _dt.datetime
    updated_at: _dt.datetime | None = None


class SessionState(BaseModel):
    """Everything one browser session owns.

    `tasks` keeps insertion order with the newest add at the head. The
    displayed order is derived separately and never written back here.
    """

    tasks: list[Task] = Field(default_factory=list)
    editing_task_id: str | None = None


class TaskStats(BaseModel):
    total: int = 0
    completed: int = 0
    percent: int = 0


__all__ = ["SessionState", "Task", "TaskStats"]
