from .errors import InternalError, ValidationError
from .models import SessionState, Task, TaskStats
from .store import TaskListStore, sanitize_text

__all__ = [
    "InternalError",
    "SessionState",
    "Task",
    "TaskListStore",
    "TaskStats",
    "ValidationError",
    "sanitize_text",
]
