# Rev 0.2.0
from __future__ import annotations

from typing import Iterable, List, Optional

from PySide6.QtCore import QObject, Signal

from ..models.entities import Task, now_millis

HOUR_MS = 60 * 60 * 1000


def upcoming_deadlines(tasks: Iterable[Task], now: int, window_ms: int = HOUR_MS) -> List[Task]:
    """Active tasks whose deadline falls in [now, now + window_ms]."""
    return [
        t for t in tasks
        if not t.is_completed and t.deadline is not None and now <= t.deadline <= now + window_ms
    ]


class ReminderNotifier(QObject):
    """
    Emits reminderDue(task_id, title) for each task due within the window.
    Presenting the notification is up to whoever listens.
    """

    reminderDue = Signal(int, str)

    def __init__(self, window_ms: int = HOUR_MS):
        super().__init__()
        self._window_ms = window_ms

    def check(self, tasks: Iterable[Task], now: Optional[int] = None) -> List[Task]:
        due = upcoming_deadlines(tasks, now if now is not None else now_millis(), self._window_ms)
        for t in due:
            self.reminderDue.emit(int(t.id or 0), t.title)
        return due
