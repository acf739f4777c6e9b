from __future__ import annotations


class ValidationError(ValueError):
    """Rejected input; the mutation was not applied."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field} {message}")
        self.field = field


class InternalError(RuntimeError):
    """Unexpected failure of a store dependency (clock, id source)."""


__all__ = ["InternalError", "ValidationError"]
