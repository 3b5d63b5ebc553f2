# Rev 0.2.0
from __future__ import annotations


class TaskValidationError(ValueError):
    """Raised at the create/edit boundary before anything reaches storage."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class WrongThreadError(RuntimeError):
    """Blocking work was attempted on the interactive UI thread."""


def validate_title(title: str | None) -> str:
    """Return the trimmed title or raise TaskValidationError if it is blank."""
    cleaned = (title or "").strip()
    if not cleaned:
        raise TaskValidationError("title", "Enter a title")
    return cleaned
