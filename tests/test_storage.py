# tests/test_storage.py
# Integration tests for the SQLite engine: schema, CRUD no-op semantics, cascades, invalidation

from __future__ import annotations

import sqlite3

import pytest

from tasknest.models.entities import Category, Tag, Task, TaskTagCrossRef
from tasknest.models.types import TASK_TAGS, TASKS
from tasknest.repositories.db import Database
from tasknest.repositories.sqlite_category_repository import SQLiteCategoryRepository
from tasknest.repositories.sqlite_tag_repository import SQLiteTagRepository
from tasknest.repositories.sqlite_task_repository import SQLiteTaskRepository
from tasknest.repositories.sqlite_task_tag_repository import SQLiteTaskTagRepository


@pytest.fixture()
def tasks(db):
    return SQLiteTaskRepository(db)


@pytest.fixture()
def tags(db):
    return SQLiteTagRepository(db)


@pytest.fixture()
def links(db):
    return SQLiteTaskTagRepository(db)


@pytest.fixture()
def categories(db):
    return SQLiteCategoryRepository(db)


def test_migrations_are_recorded_once(db: Database):
    assert db.applied() == {"0001_initial_schema.sql", "0002_indexes.sql"}
    assert db.run_migrations() == []


def test_pragmas(db: Database):
    assert db.fetchone("PRAGMA foreign_keys")[0] == 1
    assert db.fetchone("PRAGMA journal_mode")[0].lower() == "wal"


def test_insert_assigns_id_and_round_trips(tasks):
    task_id = tasks.insert_task(Task(title="Test Task", description="Test Description", deadline=42))
    assert task_id > 0
    got = tasks.get_task(task_id)
    assert got.title == "Test Task"
    assert got.description == "Test Description"
    assert got.is_completed is False
    assert got.deadline == 42
    assert got.category_id is None


def test_insert_with_explicit_id_keeps_it(tasks):
    assert tasks.insert_task(Task(id=77, title="pinned")) == 77
    assert tasks.get_task(77).title == "pinned"


def test_update_and_delete_of_unknown_id_are_noops(db, tasks):
    seen = []
    db.tracker.tablesInvalidated.connect(lambda tables: seen.append(tables))
    assert tasks.update_task(Task(id=999, title="ghost")) is False
    assert tasks.delete_task(999) is False
    assert tasks.set_completed(999, True) is False
    assert seen == []
    assert tasks.update_task(Task(id=None, title="no id")) is False


def test_write_bumps_table_versions(db, tasks):
    before = db.tracker.versions()
    task_id = tasks.insert_task(Task(title="a"))
    tasks.delete_task(task_id)
    after = db.tracker.versions()
    assert after[TASKS] == before[TASKS] + 2
    assert after[TASK_TAGS] == before[TASK_TAGS] + 1


def test_delete_task_cascades_links(tasks, tags, links):
    task_id = tasks.insert_task(Task(title="t"))
    tag_id = tags.insert_tag(Tag(id=None, name="Work"))
    links.insert_task_tag(TaskTagCrossRef(task_id, tag_id))
    tasks.delete_task(task_id)
    assert links.count_for_tag(tag_id) == 0
    assert tags.get_tag(tag_id) is not None


def test_delete_tag_cascades_links(tasks, tags, links):
    task_id = tasks.insert_task(Task(title="t"))
    tag_id = tags.insert_tag(Tag(id=None, name="Home"))
    links.insert_task_tag(TaskTagCrossRef(task_id, tag_id))
    assert tags.delete_tag(tag_id) is True
    assert links.get_task_tags(task_id) == []


def test_duplicate_link_raises(tasks, tags, links):
    task_id = tasks.insert_task(Task(title="t"))
    tag_id = tags.insert_tag(Tag(id=None, name="Urgent"))
    links.insert_task_tag(TaskTagCrossRef(task_id, tag_id))
    with pytest.raises(sqlite3.IntegrityError):
        links.insert_task_tag(TaskTagCrossRef(task_id, tag_id))


def test_link_to_missing_task_raises(tags, links):
    tag_id = tags.insert_tag(Tag(id=None, name="Urgent"))
    with pytest.raises(sqlite3.IntegrityError):
        links.insert_task_tag(TaskTagCrossRef(12345, tag_id))


def test_delete_category_clears_reference(tasks, categories):
    cat_id = categories.insert_category(Category(id=None, name="Errands", color="#FF8800"))
    task_id = tasks.insert_task(Task(title="milk", category_id=cat_id))
    assert categories.delete_category(cat_id) is True
    assert tasks.get_task(task_id).category_id is None


def test_category_color_must_be_hex(categories):
    with pytest.raises(sqlite3.IntegrityError):
        categories.insert_category(Category(id=None, name="bad", color="orange"))


def test_tag_names_for_tasks_in_tag_id_order(tasks, tags, links):
    a = tasks.insert_task(Task(title="a"))
    b = tasks.insert_task(Task(title="b"))
    t1 = tags.insert_tag(Tag(id=None, name="one"))
    t2 = tags.insert_tag(Tag(id=None, name="two"))
    links.insert_task_tag(TaskTagCrossRef(a, t2))
    links.insert_task_tag(TaskTagCrossRef(a, t1))
    names = links.tag_names_for_tasks([a, b])
    assert names == {a: ["one", "two"], b: []}


def test_transaction_rolls_back_and_holds_invalidations(db, tasks):
    seen = []
    db.tracker.tablesInvalidated.connect(lambda tables: seen.append(tables))
    with pytest.raises(RuntimeError):
        with db.transaction():
            tasks.insert_task(Task(title="lost"))
            raise RuntimeError("boom")
    assert tasks.count_tasks() == 0
    assert seen == []

    with db.transaction():
        tasks.insert_task(Task(title="kept 1"))
        tasks.insert_task(Task(title="kept 2"))
        assert seen == []
    assert seen == [[TASKS]]
    assert tasks.count_tasks() == 2


def test_max_active_id(tasks):
    assert tasks.max_active_id() == 0
    tasks.insert_task(Task(title="a"))
    b = tasks.insert_task(Task(title="b"))
    tasks.insert_task(Task(title="c", is_completed=True))
    assert tasks.max_active_id() == b


def test_reopen_keeps_data(db, tasks):
    tasks.insert_task(Task(title="durable"))
    db.reopen()
    assert [t.title for t in tasks.list_tasks()] == ["durable"]


def test_failed_commit_rolls_back_and_keeps_notifying(db, tasks, tags, links):
    seen = []
    db.tracker.tablesInvalidated.connect(lambda tables: seen.append(tables))
    tag_id = tags.insert_tag(Tag(id=None, name="Work"))
    seen.clear()

    with pytest.raises(sqlite3.IntegrityError):
        with db.transaction():
            # FK violations are checked at COMMIT, so COMMIT is what fails
            db.execute("PRAGMA defer_foreign_keys = ON;")
            tasks.insert_task(Task(title="orphaned"))
            links.insert_task_tag(TaskTagCrossRef(4242, tag_id))

    assert not db.conn.in_transaction
    assert tasks.count_tasks() == 0
    assert seen == []

    tasks.insert_task(Task(title="after"))
    assert seen == [[TASKS]]
    with db.transaction():
        tasks.insert_task(Task(title="inside"))
    assert seen[-1] == [TASKS]
    assert tasks.count_tasks() == 2


def test_delete_tag_removes_only_its_links(tasks, tags, links):
    shared = tags.insert_tag(Tag(id=None, name="Shared"))
    other = tags.insert_tag(Tag(id=None, name="Other"))
    tagged = [tasks.insert_task(Task(title=f"t{i}")) for i in range(3)]
    bystander = tasks.insert_task(Task(title="bystander"))
    for task_id in tagged:
        links.insert_task_tag(TaskTagCrossRef(task_id, shared))
    links.insert_task_tag(TaskTagCrossRef(tagged[0], other))
    links.insert_task_tag(TaskTagCrossRef(bystander, other))

    assert links.count_for_tag(shared) == 3
    assert tags.delete_tag(shared) is True

    assert links.count_for_tag(shared) == 0
    assert links.get_task_tags(tagged[0]) == [TaskTagCrossRef(tagged[0], other)]
    assert links.get_task_tags(tagged[1]) == []
    assert links.get_task_tags(bystander) == [TaskTagCrossRef(bystander, other)]
    assert tasks.count_tasks() == 4


def test_delete_category_keeps_every_dependent_task(tasks, categories):
    doomed = categories.insert_category(Category(id=None, name="Errands", color="#FF8800"))
    kept = categories.insert_category(Category(id=None, name="Work", color="#0088FF"))
    dependents = [tasks.insert_task(Task(title=f"errand {i}", category_id=doomed)) for i in range(3)]
    unrelated = tasks.insert_task(Task(title="report", category_id=kept))
    loose = tasks.insert_task(Task(title="loose"))

    assert categories.delete_category(doomed) is True

    assert tasks.count_tasks() == 5
    assert all(tasks.get_task(i).category_id is None for i in dependents)
    assert tasks.get_task(unrelated).category_id == kept
    assert tasks.get_task(loose).category_id is None
    assert [c.id for c in categories.list_categories()] == [kept]
