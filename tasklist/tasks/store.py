from __future__ import annotations

import datetime as _dt
import html
import uuid
from collections.abc import Callable

from .errors import InternalError, ValidationError
from .models import SessionState, Task, TaskStats

Clock = Callable[[], _dt.datetime]
IdFactory = Callable[[], str]


def _utc_now() -> _dt.datetime:
    return _dt.datetime.now(_dt.UTC)


def _new_task_id() -> str:
    return uuid.uuid4().hex


def sanitize_text(value: str | None, *, field: str = "text") -> str:
    """Trim and HTML-escape user text, rejecting blank input.

    Applied identically on add and on edit so stored text is always safe to
    render and is never escaped twice.
    """
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    v = value.strip()
    if not v:
        raise ValidationError(field, "must be non-empty")
    return html.escape(v, quote=True)


class TaskListStore:
    """Task list operations over one session's state.

    The store mutates the `SessionState` it is given in place. Callers that
    share a state between threads must serialize access (see
    `tasklist.sessions.SessionManager`).
    """

    def __init__(
        self,
        state: SessionState | None = None,
        *,
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
    ) -> None:
        self.state = state if state is not None else SessionState()
        self._clock = clock or _utc_now
        self._id_factory = id_factory or _new_task_id

    # helpers
    def _now(self) -> _dt.datetime:
        try:
            return self._clock()
        except Exception as exc:
            raise InternalError("clock unavailable") from exc

    def _fresh_id(self) -> str:
        # uuid4 ids do not repeat; the check guards injected factories
        seen = {t.id for t in self.state.tasks}
        try:
            for _ in range(8):
                candidate = self._id_factory()
                if candidate not in seen:
                    return candidate
        except Exception as exc:
            raise InternalError("id source unavailable") from exc
        raise InternalError("id source keeps returning ids already in use")

    def _find(self, task_id: str) -> Task | None:
        for task in self.state.tasks:
            if task.id == task_id:
                return task
        return None

    @property
    def editing_task_id(self) -> str | None:
        return self.state.editing_task_id

    def get(self, task_id: str) -> Task | None:
        return self._find(task_id)

    # mutations
    def add(self, text: str) -> Task:
        self.state.editing_task_id = None
        clean = sanitize_text(text)
        task = Task(id=self._fresh_id(), text=clean, created_at=self._now())
        self.state.tasks.insert(0, task)
        return task

    def delete(self, task_id: str) -> None:
        self.state.tasks = [t for t in self.state.tasks if t.id != task_id]
        self.state.editing_task_id = None

    def toggle(self, task_id: str) -> None:
        task = self._find(task_id)
        if task is not None:
            task.completed = not task.completed
        self.state.editing_task_id = None

    def begin_edit(self, task_id: str) -> None:
        # No existence check: an unknown id simply renders no edit form
        self.state.editing_task_id = task_id

    def commit_edit(self, task_id: str, text: str) -> None:
        self.state.editing_task_id = None
        clean = sanitize_text(text)
        task = self._find(task_id)
        if task is None:
            return
        task.updated_at = self._now()
        task.text = clean

    def cancel_edit(self) -> None:
        self.state.editing_task_id = None

    # views
    def sorted_view(self) -> list[Task]:
        """Incomplete tasks first, newest first within each group.

        Both passes are stable, so tasks sharing a timestamp keep their
        canonical (newest-add-first) order.
        """
        newest_first = sorted(self.state.tasks, key=lambda t: t.created_at, reverse=True)
        return sorted(newest_first, key=lambda t: t.completed)

    def stats(self) -> TaskStats:
        total = len(self.state.tasks)
        done = sum(1 for t in self.state.tasks if t.completed)
        if total == 0:
            return TaskStats(total=0, completed=0, percent=0)
        # round half up on done / total * 100 without float error
        percent = (done * 200 + total) // (2 * total)
        return TaskStats(total=total, completed=done, percent=percent)


__all__ = ["Clock", "IdFactory", "TaskListStore", "sanitize_text"]
