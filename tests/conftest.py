# Rev 0.3.0

"""Pytest fixtures for tasknest (Rev 0.3.0)"""
from __future__ import annotations
import pytest
from pathlib import Path

from PySide6.QtCore import QCoreApplication

from tasknest.repositories.db import Database
from tasknest.services.task_repository import TaskRepository


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture()
def db(tmp_path: Path):
    database = Database(tmp_path / "task_database.db")
    try:
        yield database
    finally:
        database.close()


@pytest.fixture()
def repo(db: Database) -> TaskRepository:
    return TaskRepository(db)


@pytest.fixture()
def backup_dir(tmp_path: Path) -> Path:
    return tmp_path / "backups"


class Recorder:
    """Collects every snapshot a live query delivers."""

    def __init__(self):
        self.snapshots: list[list] = []

    def __call__(self, rows):
        self.snapshots.append(list(rows))

    @property
    def last(self) -> list:
        return self.snapshots[-1]


@pytest.fixture()
def recorder() -> Recorder:
    return Recorder()
