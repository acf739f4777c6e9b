from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from tasklist.tasks.store import TaskListStore

IntentName = Literal["add", "delete", "toggle", "begin_edit", "commit_edit", "cancel_edit"]

# Submit-button field -> intent, checked in this order
_BUTTONS: tuple[tuple[str, IntentName], ...] = (
    ("add_task", "add"),
    ("delete_task", "delete"),
    ("toggle_task", "toggle"),
    ("start_edit", "begin_edit"),
    ("edit_task", "commit_edit"),
    ("cancel_edit", "cancel_edit"),
)

_NEEDS_ID: frozenset[IntentName] = frozenset({"delete", "toggle", "begin_edit", "commit_edit"})


class BadIntent(ValueError):
    """The posted form does not describe a usable intent."""


@dataclass(slots=True)
class Intent:
    name: IntentName
    task_id: str | None = None
    text: str | None = None


def _field(form: Mapping[str, Any], key: str) -> str | None:
    value = form.get(key)
    return value if isinstance(value, str) else None


def parse_intent(form: Mapping[str, Any]) -> Intent:
    """Map the page's form fields onto exactly one intent."""
    for button, name in _BUTTONS:
        if button not in form:
            continue
        task_id = (_field(form, "task_id") or "").strip() or None
        if name in _NEEDS_ID and task_id is None:
            raise BadIntent(f"{name} requires task_id")
        if name == "add":
            return Intent(name, text=_field(form, "new_task"))
        if name == "commit_edit":
            return Intent(name, task_id=task_id, text=_field(form, "task_text"))
        return Intent(name, task_id=task_id)
    raise BadIntent("no recognised action in form")


def apply_intent(store: TaskListStore, intent: Intent) -> None:
    """Run one intent against the store.

    Missing text is passed through as-is so the store rejects it with the
    same `ValidationError` as blank text.
    """
    if intent.name == "add":
        store.add(intent.text)  # type: ignore[arg-type]
    elif intent.name == "delete":
        store.delete(intent.task_id)  # type: ignore[arg-type]
    elif intent.name == "toggle":
        store.toggle(intent.task_id)  # type: ignore[arg-type]
    elif intent.name == "begin_edit":
        store.begin_edit(intent.task_id)  # type: ignore[arg-type]
    elif intent.name == "commit_edit":
        store.commit_edit(intent.task_id, intent.text)  # type: ignore[arg-type]
    else:
        store.cancel_edit()


__all__ = ["BadIntent", "Intent", "IntentName", "apply_intent", "parse_intent"]
