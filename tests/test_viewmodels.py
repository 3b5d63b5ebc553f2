# tests/test_viewmodels.py
# View-model flows: list screen, editor, maintenance screen

from __future__ import annotations

from datetime import datetime

import pytest
from PySide6.QtCore import QThreadPool

from tasknest.models.entities import Tag, Task, TaskTagCrossRef
from tasknest.models.types import TaskSortOrder
from tasknest.services.backup_manager import BackupManager
from tasknest.services.data_exporter import DataExporter
from tasknest.services.default_tags import POPULAR_TAGS
from tasknest.viewmodels.maintenance_viewmodel import MaintenanceViewModel
from tasknest.viewmodels.task_editor_viewmodel import TaskEditorViewModel
from tasknest.viewmodels.tasks_viewmodel import TasksViewModel


class Signals:
    def __init__(self, *signals):
        self.events = []
        for sig in signals:
            sig.connect(lambda *args: self.events.append(args))


# -------------------------
# List screen
# -------------------------
def test_list_reloads_on_changes_and_filters(repo):
    vm = TasksViewModel(repo)
    got = Signals(vm.tasksReloaded)
    vm.start()
    assert got.events[-1][0] == 0

    repo.insert(Task(title="b", deadline=20))
    repo.insert(Task(title="a"))
    assert [r.task.title for r in vm.rows] == ["b", "a"]

    vm.set_filters(order=TaskSortOrder.TITLE)
    assert [r.task.title for r in vm.rows] == ["a", "b"]

    vm.set_filters(search="B")
    assert [r.task.title for r in vm.rows] == ["b"]

    vm.set_filters(show_completed=True)
    assert vm.rows == []
    vm.close()


def test_complete_and_restore_notices(repo):
    vm = TasksViewModel(repo)
    notices = Signals(vm.notice)
    task_id = repo.insert(Task(title="t"))
    assert vm.set_completed(task_id, True) is True
    assert vm.set_completed(task_id, False) is True
    assert vm.set_completed(999, True) is False
    assert [e[0] for e in notices.events] == ["Task completed", "Task restored"]


def test_delete_then_undo_restores_task_and_tags(repo):
    vm = TasksViewModel(repo)
    vm.start()
    task_id = repo.insert(Task(title="keep me", deadline=7))
    tag_id = repo.insert_tag(Tag(id=None, name="Work"))
    repo.insert_task_tag(TaskTagCrossRef(task_id, tag_id))

    assert vm.delete_task(task_id) is True
    assert vm.can_undo()
    assert vm.rows == []

    assert vm.undo_delete() == task_id
    assert not vm.can_undo()
    assert vm.undo_delete() is None
    assert vm.rows[0].task.deadline == 7
    assert vm.rows[0].tags == ["Work"]
    vm.close()


def test_show_from_date(repo):
    vm = TasksViewModel(repo)
    repo.insert(Task(title="past", deadline=1))
    repo.insert(Task(title="future", deadline=100, is_completed=True))
    vm.show_from_date(50)
    assert [r.task.title for r in vm.rows] == ["future"]
    vm.close()


# -------------------------
# Editor
# -------------------------
def test_blank_title_reports_error_and_writes_nothing(repo):
    vm = TaskEditorViewModel(repo)
    errors = Signals(vm.titleError)
    vm.load()
    assert vm.save(title="   ") is None
    assert errors.events == [("Enter a title",)]
    assert repo.count_tasks() == 0


def test_editor_creates_defaults_and_saves_selection(repo):
    vm = TaskEditorViewModel(repo)
    loaded = Signals(vm.tagsLoaded)
    vm.load()
    tags = loaded.events[-1][0]
    assert [t.name for t in tags] == list(POPULAR_TAGS)

    vm.set_tag_selected(tags[2].id, True)
    vm.set_tag_selected(tags[0].id, True)
    vm.set_tag_selected(tags[2].id, False)
    task_id = vm.save(title="  Plan trip ", description=" soon ", deadline=123)

    task = repo.get_task(task_id)
    assert (task.title, task.description, task.deadline) == ("Plan trip", "soon", 123)
    assert [t.name for t in repo.tags_for_task(task_id)] == [POPULAR_TAGS[0]]


def test_editor_update_keeps_completion_and_preselects(repo):
    task_id = repo.insert(Task(title="old", is_completed=True, timestamp=5))
    editor = TaskEditorViewModel(repo)
    notices = Signals(editor.notice)
    editor.load(task_id)
    assert editor.selected_tag_ids == set()
    editor.set_tag_selected(editor.tags[3].id, True)
    assert editor.save(title="new") == task_id
    task = repo.get_task(task_id)
    assert task.title == "new" and task.is_completed and task.timestamp == 5
    assert notices.events == [("Task updated",)]

    again = TaskEditorViewModel(repo)
    again.load(task_id)
    assert again.selected_tag_ids == {editor.tags[3].id}


# -------------------------
# Maintenance
# -------------------------
@pytest.fixture()
def maintenance(repo, db, backup_dir):
    exporter = DataExporter(backup_dir, clock=lambda: datetime(2026, 2, 2, 2, 2, 2))
    backups = BackupManager(db, backup_dir, pool=QThreadPool())
    return MaintenanceViewModel(repo, exporter, backups)


def test_seed_stats_and_clear(maintenance, repo):
    assert maintenance.add_test_tasks() == 100
    stats = maintenance.check_database()
    assert stats["total"] == 100
    assert stats["completed"] == 33
    assert stats["active"] == 67
    assert maintenance.clear_database() == 100
    assert repo.count_tasks() == 0


def test_export_then_import_latest(maintenance, repo):
    repo.insert(Task(title="active"))
    repo.insert(Task(title="done", is_completed=True))
    path = maintenance.export_tasks()
    assert path is not None and path.exists()
    assert maintenance.import_latest() == 1
    assert repo.count_tasks(completed=False) == 2


def test_import_latest_without_backups(maintenance):
    notices = Signals(maintenance.notice)
    assert maintenance.import_latest() == 0
    assert notices.events == [("No backups available",)]


def test_snapshot_reports_result(maintenance):
    finished = Signals(maintenance.snapshotFinished)
    maintenance._on_snapshot_result(maintenance._backups.restore_database())
    assert finished.events == [(False, "No backups found")]
