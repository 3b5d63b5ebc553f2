# tests/test_reminders_and_theme.py

from __future__ import annotations

from PySide6.QtCore import QSettings

from tasknest.models.entities import Task
from tasknest.services.reminders import HOUR_MS, ReminderNotifier, upcoming_deadlines
from tasknest.services.theme_manager import ThemeManager

NOW = 1_700_000_000_000


def test_upcoming_deadlines_window():
    tasks = [
        Task(id=1, title="soon", deadline=NOW + 10),
        Task(id=2, title="edge", deadline=NOW + HOUR_MS),
        Task(id=3, title="later", deadline=NOW + HOUR_MS + 1),
        Task(id=4, title="past", deadline=NOW - 1),
        Task(id=5, title="done", deadline=NOW + 10, is_completed=True),
        Task(id=6, title="open"),
    ]
    assert [t.id for t in upcoming_deadlines(tasks, NOW)] == [1, 2]


def test_notifier_emits_per_due_task():
    notifier = ReminderNotifier()
    seen = []
    notifier.reminderDue.connect(lambda task_id, title: seen.append((task_id, title)))
    notifier.check([Task(id=9, title="Pay rent", deadline=NOW + 5)], now=NOW)
    assert seen == [(9, "Pay rent")]


def test_dark_mode_persists(tmp_path):
    ini = str(tmp_path / "theme.ini")
    theme = ThemeManager(QSettings(ini, QSettings.Format.IniFormat))
    changes = []
    theme.themeChanged.connect(lambda dark: changes.append(dark))
    assert theme.is_dark_mode() is False
    assert theme.toggle() is True
    assert changes == [True]

    reloaded = ThemeManager(QSettings(ini, QSettings.Format.IniFormat))
    assert reloaded.is_dark_mode() is True
    reloaded.set_dark_mode(False)
    assert reloaded.is_dark_mode() is False
