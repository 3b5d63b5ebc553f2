# Rev 0.3.0
"""VM for the settings/debug screen: export/import, snapshots, test data, stats, theme."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

from PySide6.QtCore import QObject, Signal

from ..models.entities import Task, now_millis
from ..services.backup_manager import BackupManager
from ..services.data_exporter import DataExporter
from ..services.task_repository import TaskRepository
from ..services.theme_manager import ThemeManager
from ..utils.result import Result, Success

logger = logging.getLogger(__name__)


class MaintenanceViewModel(QObject):
    notice = Signal(str)
    statsLoaded = Signal(object)
    snapshotFinished = Signal(bool, str)    # ok, message

    def __init__(
        self,
        repo: TaskRepository,
        exporter: DataExporter,
        backups: BackupManager,
        theme: Optional[ThemeManager] = None,
    ):
        super().__init__()
        self._repo = repo
        self._exporter = exporter
        self._backups = backups
        self._theme = theme

    # ---- JSON
    def export_tasks(self) -> Optional[Path]:
        """Writes the current active tasks; the category list is left empty."""
        try:
            tasks = self._repo.all_active_tasks.first()
        except Exception:
            logger.exception("Reading tasks for export failed")
            self.notice.emit("Export failed: could not read tasks")
            return None
        result = self._exporter.export_to_json(tasks, [])
        if isinstance(result, Success):
            self.notice.emit(f"Exported: {result.value.name}")
            return result.value
        self.notice.emit(result.message)
        return None

    def import_latest(self) -> int:
        backups = self._exporter.get_backups_list()
        if not backups:
            self.notice.emit("No backups available")
            return 0
        return self.import_file(backups[0])

    def import_file(self, path: Path) -> int:
        result = self._exporter.import_from_json(path)
        if not isinstance(result, Success):
            self.notice.emit(result.message)
            return 0
        try:
            count = self._repo.import_backup(result.value)
        except Exception:
            logger.exception("Inserting imported tasks failed")
            self.notice.emit("Import failed: could not save tasks")
            return 0
        self.notice.emit(f"Imported {count} tasks")
        return count

    def create_auto_backup(self) -> None:
        """Quiet JSON export, run when the app is paused or closed."""
        try:
            self._exporter.export_to_json(self._repo.all_active_tasks.first(), [])
        except Exception:
            logger.exception("Auto backup failed")

    # ---- snapshots
    def backup_database(self) -> None:
        self._backups.backup_async(self._on_snapshot_result)

    def restore_database(self) -> None:
        self._backups.restore_async(self._on_snapshot_result)

    def _on_snapshot_result(self, result: Result[Path]) -> None:
        if isinstance(result, Success):
            message = f"Done: {result.value.name}"
            self.snapshotFinished.emit(True, message)
        else:
            message = result.message
            self.snapshotFinished.emit(False, message)
        self.notice.emit(message)

    # ---- test data / stats
    def add_test_tasks(self, count: int = 100) -> int:
        now = now_millis()
        added = 0
        try:
            for i in range(1, count + 1):
                self._repo.insert(
                    Task(
                        title=f"Test task #{i}",
                        description=f"Generated test task {i}",
                        is_completed=(i % 3 == 0),
                        timestamp=now,
                        deadline=now + i * 24 * 60 * 60 * 1000 if i % 2 == 0 else None,
                    )
                )
                added += 1
        except Exception:
            logger.exception("Adding test tasks stopped after %d", added)
            self.notice.emit(f"Added {added} of {count} test tasks")
            return added
        self.notice.emit(f"Added {added} test tasks")
        return added

    def check_database(self) -> Dict[str, int]:
        stats = {
            "total": self._repo.count_tasks(),
            "active": self._repo.count_tasks(completed=False),
            "completed": self._repo.count_tasks(completed=True),
            "tags": len(self._repo.list_tags()),
            "categories": len(self._repo.list_categories()),
        }
        self.statsLoaded.emit(stats)
        return stats

    def clear_database(self) -> int:
        try:
            removed = self._repo.delete_all()
        except Exception:
            logger.exception("Clearing tasks failed")
            self.notice.emit("Could not clear the database")
            return 0
        self.notice.emit(f"Removed {removed} tasks")
        return removed

    # ---- theme
    def set_dark_mode(self, dark: bool) -> None:
        if self._theme is not None:
            self._theme.set_dark_mode(dark)
