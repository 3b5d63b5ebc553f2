# Rev 0.3.0

"""SQLite connection & migration runner (Rev 0.3.0)
- WAL mode, foreign_keys=ON, autocommit unless inside transaction()
- Applies SQL files in repositories/migrations in lexical order
- Tracks applied files in schema_migrations(filename TEXT PRIMARY KEY, applied_at UTC)
- One re-entrant lock serializes every statement (shared across threads)
- Committed writes are reported to the InvalidationTracker
"""
from __future__ import annotations
import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from datetime import datetime, timezone
from typing import Any, Iterator, Optional, Sequence, Set


from ..utils.paths import MIGRATIONS_DIR
from .invalidation import InvalidationTracker

logger = logging.getLogger(__name__)


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


class Database:
    def __init__(
        self,
        path: Path | str,
        *,
        migrations_dir: Path = MIGRATIONS_DIR,
        tracker: Optional[InvalidationTracker] = None,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.migrations_dir = migrations_dir
        self.tracker = tracker or InvalidationTracker()
        self.lock = threading.RLock()
        self._pending: Optional[Set[str]] = None
        self.conn = self._open()
        self.run_migrations()
        logger.info("SQLite open %s", self.path)

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path, isolation_level=None, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA foreign_keys=ON;")
        conn.execute("PRAGMA busy_timeout=5000;")
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_migrations (filename TEXT PRIMARY KEY, applied_at TEXT NOT NULL)"
        )
        return conn

    def close(self) -> None:
        with self.lock:
            if self.conn is not None:
                self.conn.close()
                self.conn = None
                logger.info("SQLite closed %s", self.path)

    def reopen(self) -> None:
        """Reconnect to the backing file (used after a snapshot restore)."""
        with self.lock:
            self.close()
            self.conn = self._open()
            self.run_migrations()
        logger.info("SQLite reopened %s", self.path)

    # -------------------------
    # Migrations
    # -------------------------
    def applied(self) -> set[str]:
        rows = self.fetchall("SELECT filename FROM schema_migrations")
        return {r[0] for r in rows}

    def run_migrations(self) -> list[str]:
        with self.lock:
            applied = self.applied()
            to_apply = [p for p in sorted(self.migrations_dir.glob("*.sql")) if p.name not in applied]
            for p in to_apply:
                sql = p.read_text(encoding="utf-8")
                self.conn.executescript(sql)
                self.conn.execute(
                    "INSERT INTO schema_migrations(filename, applied_at) VALUES(?, ?)",
                    (p.name, datetime.now(timezone.utc).isoformat()),
                )
                logger.info("Applied migration %s", p.name)
        return [p.name for p in to_apply]

    # -------------------------
    # Statements
    # -------------------------
    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        with self.lock:
            return self.conn.execute(sql, params)

    def fetchall(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        with self.lock:
            return self.conn.execute(sql, params).fetchall()

    def fetchone(self, sql: str, params: Sequence[Any] = ()) -> Optional[sqlite3.Row]:
        with self.lock:
            return self.conn.execute(sql, params).fetchone()

    def write(self, sql: str, params: Sequence[Any] = (), *, tables: Sequence[str]) -> sqlite3.Cursor:
        """Run one mutating statement and report the touched tables when it changed rows."""
        with self.lock:
            cur = self.conn.execute(sql, params)
            if cur.rowcount != 0:
                self.notify(*tables)
            return cur

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """BEGIN/COMMIT around a block; invalidations are held back until COMMIT."""
        with self.lock:
            if self._pending is not None:
                # nested: join the outer unit
                yield self.conn
                return
            self._pending = set()
            self.conn.execute("BEGIN;")
            try:
                yield self.conn
                self.conn.execute("COMMIT;")
            except BaseException:
                # COMMIT itself can fail (busy, deferred FK) and leave the transaction open
                self._pending = None
                if self.conn.in_transaction:
                    self.conn.execute("ROLLBACK;")
                raise
            touched, self._pending = self._pending, None
            self.tracker.invalidate(*touched)

    def notify(self, *tables: str) -> None:
        with self.lock:
            if self._pending is not None:
                self._pending.update(tables)
                return
            self.tracker.invalidate(*tables)

    # -------------------------
    # Snapshots
    # -------------------------
    def checkpoint(self) -> None:
        """Fold the WAL into the main file so a byte copy of it is complete."""
        with self.lock:
            self.conn.execute("PRAGMA wal_checkpoint(TRUNCATE);")

    def side_files(self) -> list[Path]:
        return [self.path.with_name(self.path.name + suffix) for suffix in ("-wal", "-shm")]

    # Convenience cursor
    def cursor(self) -> sqlite3.Cursor:
        return self.conn.cursor()
