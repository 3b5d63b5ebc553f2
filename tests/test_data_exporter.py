# tests/test_data_exporter.py
# JSON export/import codec and backup file listing

from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path

from tasknest.models.entities import Category, Task
from tasknest.services.data_exporter import DataExporter, task_from_json
from tasknest.services.task_repository import TaskRepository
from tasknest.repositories.db import Database
from tasknest.utils.result import Failure, Success

FIXED = datetime(2026, 3, 14, 15, 9, 26)


def _exporter(backup_dir: Path, when: datetime = FIXED) -> DataExporter:
    return DataExporter(backup_dir, clock=lambda: when)


def test_export_writes_named_pretty_document(backup_dir):
    tasks = [Task(id=3, title="Write report", description="", timestamp=1_000, deadline=None)]
    result = _exporter(backup_dir).export_to_json(tasks, [Category(id=1, name="Work", color="#112233")])
    assert isinstance(result, Success)
    path = result.value
    assert path.parent == backup_dir
    assert path.name == f"tasks_backup_{int(FIXED.timestamp() * 1000)}.json"

    text = path.read_text(encoding="utf-8")
    assert "\n  " in text
    doc = json.loads(text)
    assert doc["exportDate"] == "2026-03-14 15:09:26"
    assert doc["categories"] == [{"id": 1, "name": "Work", "color": "#112233"}]
    assert doc["tasks"] == [
        {
            "id": 3,
            "title": "Write report",
            "description": "",
            "isCompleted": False,
            "categoryId": None,
            "timestamp": 1_000,
            "deadline": None,
        }
    ]


def test_round_trip_into_empty_store(repo, tmp_path, backup_dir):
    repo.insert(Task(title="one", description="first", timestamp=5, deadline=50))
    repo.insert(Task(title="two", is_completed=True, timestamp=6))
    exporter = _exporter(backup_dir)
    path = exporter.export_to_json(
        repo.queries.tasks(completed=False).first() + repo.queries.tasks(completed=True).first(), []
    ).value

    other = Database(tmp_path / "other" / "task_database.db")
    try:
        target = TaskRepository(other)
        loaded = exporter.import_from_json(path)
        assert isinstance(loaded, Success)
        assert target.import_backup(loaded.value) == 2
        got = sorted(
            (t.title, t.description, t.is_completed, t.timestamp, t.deadline)
            for t in target.queries.tasks(completed=False).first() + target.queries.tasks(completed=True).first()
        )
        assert got == [("one", "first", False, 5, 50), ("two", "", True, 6, None)]
    finally:
        other.close()


def test_import_missing_file(backup_dir):
    result = _exporter(backup_dir).import_from_json(backup_dir / "nope.json")
    assert isinstance(result, Failure)
    assert result.message.startswith("File not found")


def test_import_malformed_json(tmp_path, backup_dir):
    bad = tmp_path / "broken.json"
    bad.write_text("{ not json", encoding="utf-8")
    result = _exporter(backup_dir).import_from_json(bad)
    assert isinstance(result, Failure)
    assert result.message.startswith("Import failed")


def test_import_rejects_wrong_field_types(tmp_path, backup_dir):
    bad = tmp_path / "typed.json"
    bad.write_text(json.dumps({"tasks": [{"title": "x", "isCompleted": "yes"}], "categories": []}), encoding="utf-8")
    result = _exporter(backup_dir).import_from_json(bad)
    assert isinstance(result, Failure)
    assert not result.ok


def test_missing_keys_read_as_null():
    task = task_from_json({"title": "bare"})
    assert task.id is None
    assert task.deadline is None
    assert task.category_id is None
    assert task.is_completed is False
    assert task.description == ""


def test_backups_list_newest_first(backup_dir):
    assert _exporter(backup_dir).get_backups_list() == []
    older = _exporter(backup_dir, datetime(2026, 1, 1, 8, 0, 0)).export_to_json([], []).value
    newer = _exporter(backup_dir, datetime(2026, 1, 2, 8, 0, 0)).export_to_json([], []).value
    os.utime(older, (1_000_000, 1_000_000))
    os.utime(newer, (2_000_000, 2_000_000))
    (backup_dir / "unrelated.json").write_text("{}", encoding="utf-8")
    assert _exporter(backup_dir).get_backups_list() == [newer, older]
