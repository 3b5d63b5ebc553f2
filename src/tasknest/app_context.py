# tasknest application context
# Rev 0.3.0

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from PySide6.QtCore import QSettings

from .repositories.db import Database
from .services.backup_manager import BackupManager
from .services.data_exporter import DataExporter
from .services.reminders import ReminderNotifier
from .services.task_repository import TaskRepository
from .services.theme_manager import ThemeManager
from .utils import paths
from .utils.config import load_settings
from .utils.logging_setup import get_logger
from .widget.task_widget import TaskWidgetProvider


@dataclass
class AppContext:
    """Central container for shared app resources, built once at start and passed around."""
    data_dir: Path
    settings: Dict[str, Any]
    db: Database
    repository: TaskRepository
    exporter: DataExporter
    backups: BackupManager
    widgets: TaskWidgetProvider
    reminders: ReminderNotifier
    theme: ThemeManager

    @classmethod
    def create(
        cls,
        data_dir: Optional[Path] = None,
        *,
        settings: Optional[Dict[str, Any]] = None,
        qsettings: Optional[QSettings] = None,
    ) -> "AppContext":
        """Initialize DB, repository, codecs, widget bridge and preferences."""
        log = get_logger("AppContext")
        root = Path(data_dir) if data_dir is not None else paths.data_dir()
        root.mkdir(parents=True, exist_ok=True)
        settings = settings if settings is not None else load_settings()

        db = Database(paths.db_path(root, settings["database"]["name"]))
        repository = TaskRepository(db)
        backup_root = paths.backup_dir(root)
        exporter = DataExporter(backup_root)
        backups = BackupManager(db, backup_root)
        backups.add_restore_listener(repository.update_widget)

        widgets = TaskWidgetProvider(repository.all_active_tasks)
        repository.add_change_listener(widgets.notify_app_widget_view_data_changed)

        log.info("AppContext initialized with DB=%s", db.path)
        return cls(
            data_dir=root,
            settings=settings,
            db=db,
            repository=repository,
            exporter=exporter,
            backups=backups,
            widgets=widgets,
            reminders=ReminderNotifier(),
            theme=ThemeManager(qsettings),
        )

    def shutdown(self) -> None:
        """Auto-export (when enabled), stop background work, close the database."""
        log = get_logger("AppContext")
        if self.settings.get("backups", {}).get("auto_export_on_exit"):
            result = self.exporter.export_to_json(self.repository.all_active_tasks.first(), [])
            if not result.ok:
                log.warning("Auto export on exit failed: %s", result.message)
        self.backups.pool.waitForDone()
        for widget_id in self.widgets.widget_ids():
            self.widgets.remove_widget(widget_id)
        self.db.close()
