# Rev 0.3.0

"""Whole-database snapshot backup/restore (Rev 0.3.0)
- backup: checkpoint WAL, byte copy of the live file to backups/<db-stem>_<yyyy-MM-dd_HH-mm-ss>.db
- restore: newest *.db snapshot (by mtime) replaces the live file, then the connection is reopened
- copies go through a temp file + os.replace, so the destination is either old or new, never partial
- a snapshot must pass PRAGMA quick_check and hold a tasks table before it replaces the live file
"""
from __future__ import annotations

import logging
import os
import shutil
import sqlite3
from contextlib import closing
from datetime import datetime
from pathlib import Path
from typing import Callable, List

from PySide6.QtCore import QRunnable, QThreadPool

from ..repositories.db import Database
from ..utils.result import Failure, Result, Success

logger = logging.getLogger(__name__)

SNAPSHOT_TS_FORMAT = "%Y-%m-%d_%H-%M-%S"

ResultCallback = Callable[[Result[Path]], None]


def _check_snapshot(path: Path) -> None:
    """Raise sqlite3.DatabaseError unless path is an intact task database."""
    try:
        with closing(sqlite3.connect(path)) as conn:
            status = conn.execute("PRAGMA quick_check;").fetchone()
            if status is None or status[0] != "ok":
                raise sqlite3.DatabaseError(f"snapshot failed integrity check: {status[0] if status else None}")
            if conn.execute("SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'tasks'").fetchone() is None:
                raise sqlite3.DatabaseError("snapshot has no tasks table")
    finally:
        for suffix in ("-wal", "-shm"):
            path.with_name(path.name + suffix).unlink(missing_ok=True)


class _Job(QRunnable):
    """Runs one blocking backup/restore on a pool thread and hands the Result to a callback."""

    def __init__(self, fn: Callable[[], Result[Path]], callback: ResultCallback):
        super().__init__()
        self._fn = fn
        self._callback = callback

    def run(self) -> None:
        result = self._fn()
        try:
            self._callback(result)
        except Exception:
            logger.exception("Backup callback failed")


class BackupManager:
    def __init__(
        self,
        db: Database,
        backup_dir: Path,
        *,
        clock: Callable[[], datetime] = datetime.now,
        pool: QThreadPool | None = None,
    ):
        self._db = db
        self.backup_dir = Path(backup_dir)
        self._clock = clock
        self._pool = pool or QThreadPool.globalInstance()
        self._restore_listeners: List[Callable[[], None]] = []

    @property
    def pool(self) -> QThreadPool:
        return self._pool

    def list_snapshots(self) -> List[Path]:
        """Snapshot files, most recently modified first."""
        if not self.backup_dir.is_dir():
            return []
        files = [p for p in self.backup_dir.glob("*.db") if p.is_file()]
        return sorted(files, key=lambda p: (p.stat().st_mtime, p.name), reverse=True)

    # -------------------------
    # Blocking operations
    # -------------------------
    def backup_database(self) -> Result[Path]:
        db_file = self._db.path
        if not db_file.exists():
            return Failure("Database file not found")
        target = self.backup_dir / f"{db_file.stem}_{self._clock().strftime(SNAPSHOT_TS_FORMAT)}.db"
        tmp = target.with_name(target.name + ".part")
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            with self._db.lock:
                self._db.checkpoint()
                shutil.copyfile(db_file, tmp)
            os.replace(tmp, target)
        except (OSError, sqlite3.Error) as e:
            logger.exception("Backup failed")
            tmp.unlink(missing_ok=True)
            return Failure(f"Backup failed: {e}")
        logger.info("Backup saved: %s", target)
        return Success(target)

    def add_restore_listener(self, listener: Callable[[], None]) -> None:
        """Called after a restore replaced the live data (widget refresh)."""
        if listener not in self._restore_listeners:
            self._restore_listeners.append(listener)

    def restore_database(self) -> Result[Path]:
        snapshots = self.list_snapshots()
        if not snapshots:
            return Failure("No backups found")
        db_file = self._db.path
        if not db_file.exists():
            return Failure("Database file not found")
        latest = snapshots[0]
        tmp = db_file.with_name(db_file.name + ".restore")
        try:
            shutil.copyfile(latest, tmp)
            _check_snapshot(tmp)
            with self._db.lock:
                self._swap_in(tmp)
        except (OSError, sqlite3.Error) as e:
            logger.exception("Restore failed")
            tmp.unlink(missing_ok=True)
            return Failure(f"Restore failed: {e}")
        self._db.tracker.invalidate_all()
        for listener in list(self._restore_listeners):
            try:
                listener()
            except Exception:
                logger.exception("Restore listener %r failed", listener)
        logger.info("Restored from: %s", latest)
        return Success(latest)

    def _swap_in(self, replacement: Path) -> None:
        """Replace the live file; on any failure the previous file is put back and reopened."""
        db_file = self._db.path
        previous = db_file.with_name(db_file.name + ".bak")
        self._db.checkpoint()
        self._db.close()
        try:
            os.replace(db_file, previous)
        except OSError:
            self._db.reopen()
            raise
        try:
            os.replace(replacement, db_file)
            for side in self._db.side_files():
                side.unlink(missing_ok=True)
            self._db.reopen()
        except (OSError, sqlite3.Error):
            self._db.close()
            os.replace(previous, db_file)
            for side in self._db.side_files():
                side.unlink(missing_ok=True)
            self._db.reopen()
            raise
        previous.unlink(missing_ok=True)

    # -------------------------
    # Background variants (no cancellation)
    # -------------------------
    def backup_async(self, callback: ResultCallback) -> None:
        self._pool.start(_Job(self.backup_database, callback))

    def restore_async(self, callback: ResultCallback) -> None:
        self._pool.start(_Job(self.restore_database, callback))
