# Rev 0.3.0

"""JSON export/import of tasks and categories (Rev 0.3.0)
- File name: tasks_backup_<unix-millis>.json in the backup dir
- Pretty printed, keys: tasks, categories, exportDate ("yyyy-MM-dd HH:mm:ss")
- Tags and task-tag links are not part of the document
"""
from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence

from ..models.entities import BackupData, Category, Task
from ..utils.result import Failure, Result, Success

logger = logging.getLogger(__name__)

EXPORT_PREFIX = "tasks_backup_"
EXPORT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# -------------------------
# Wire mapping
# -------------------------
def task_to_json(task: Task) -> Dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "isCompleted": task.is_completed,
        "categoryId": task.category_id,
        "timestamp": task.timestamp,
        "deadline": task.deadline,
    }


def category_to_json(category: Category) -> Dict[str, Any]:
    return {"id": category.id, "name": category.name, "color": category.color}


def _opt_int(obj: Dict[str, Any], key: str) -> int | None:
    value = obj.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{key}' must be a number, got {value!r}")
    return int(value)


def _str(obj: Dict[str, Any], key: str, default: str = "") -> str:
    value = obj.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string, got {value!r}")
    return value


def task_from_json(obj: Any) -> Task:
    if not isinstance(obj, dict):
        raise ValueError(f"task entry must be an object, got {type(obj).__name__}")
    completed = obj.get("isCompleted", False)
    if not isinstance(completed, bool):
        raise ValueError(f"'isCompleted' must be true/false, got {completed!r}")
    return Task(
        id=_opt_int(obj, "id"),
        title=_str(obj, "title"),
        description=_str(obj, "description"),
        is_completed=completed,
        category_id=_opt_int(obj, "categoryId"),
        timestamp=_opt_int(obj, "timestamp"),
        deadline=_opt_int(obj, "deadline"),
    )


def category_from_json(obj: Any) -> Category:
    if not isinstance(obj, dict):
        raise ValueError(f"category entry must be an object, got {type(obj).__name__}")
    return Category(id=_opt_int(obj, "id"), name=_str(obj, "name"), color=_str(obj, "color"))


def backup_to_json(data: BackupData) -> Dict[str, Any]:
    return {
        "tasks": [task_to_json(t) for t in data.tasks],
        "categories": [category_to_json(c) for c in data.categories],
        "exportDate": data.export_date,
    }


def backup_from_json(doc: Any) -> BackupData:
    if not isinstance(doc, dict):
        raise ValueError("backup document must be a JSON object")
    tasks = doc.get("tasks", [])
    categories = doc.get("categories", [])
    if not isinstance(tasks, list) or not isinstance(categories, list):
        raise ValueError("'tasks' and 'categories' must be arrays")
    return BackupData(
        tasks=[task_from_json(t) for t in tasks],
        categories=[category_from_json(c) for c in categories],
        export_date=_str(doc, "exportDate"),
    )


# -------------------------
# Files
# -------------------------
class DataExporter:
    def __init__(self, backup_dir: Path, *, clock: Callable[[], datetime] = datetime.now):
        self.backup_dir = Path(backup_dir)
        self._clock = clock

    def export_to_json(self, tasks: Sequence[Task], categories: Sequence[Category]) -> Result[Path]:
        try:
            now = self._clock()
            data = BackupData(
                tasks=list(tasks),
                categories=list(categories),
                export_date=now.strftime(EXPORT_DATE_FORMAT),
            )
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            path = self.backup_dir / f"{EXPORT_PREFIX}{int(now.timestamp() * 1000)}.json"
            path.write_text(json.dumps(backup_to_json(data), indent=2, ensure_ascii=False), encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            logger.exception("Export failed")
            return Failure(f"Export failed: {e}")
        logger.info("Exported %d tasks to %s", len(data.tasks), path)
        return Success(path)

    def import_from_json(self, file_path: Path | str) -> Result[BackupData]:
        path = Path(file_path)
        if not path.is_file():
            return Failure(f"File not found: {path}")
        try:
            data = backup_from_json(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            # json.JSONDecodeError is a ValueError
            logger.exception("Import of %s failed", path)
            return Failure(f"Import failed: {e}")
        logger.info("Read %d tasks from %s", len(data.tasks), path)
        return Success(data)

    def get_backups_list(self) -> List[Path]:
        """JSON exports, newest first."""
        if not self.backup_dir.is_dir():
            return []
        files = [p for p in self.backup_dir.glob(f"{EXPORT_PREFIX}*.json") if p.is_file()]
        return sorted(files, key=lambda p: (p.stat().st_mtime, p.name), reverse=True)
