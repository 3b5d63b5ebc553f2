# Rev 0.3.0
from __future__ import annotations

import logging
from typing import Any, Callable, FrozenSet, Iterable, List

from PySide6.QtCore import QObject, Signal, Slot

from .db import Database

logger = logging.getLogger(__name__)


class LiveQuery(QObject):
    """
    A query whose result is pushed to observers.

    observe(cb) calls cb once with the current snapshot, then again with a
    freshly materialized list every time a table the query reads from is
    invalidated. Writes made on the query's own thread are delivered before
    the write call returns.
    """

    changed = Signal(object)

    def __init__(self, db: Database, tables: Iterable[str], fetch: Callable[[], List[Any]], *, name: str = "query"):
        super().__init__()
        self._db = db
        self._tables: FrozenSet[str] = frozenset(tables)
        self._fetch = fetch
        self._name = name
        self._observers = 0
        self._last: List[Any] | None = None
        self._closed = False
        db.tracker.tablesInvalidated.connect(self._on_tables_invalidated)

    @property
    def name(self) -> str:
        return self._name

    @property
    def tables(self) -> FrozenSet[str]:
        return self._tables

    @property
    def observer_count(self) -> int:
        return self._observers

    # ---- reads
    def first(self) -> List[Any]:
        """Blocking one-shot fetch; safe from a background thread."""
        with self._db.lock:
            return list(self._fetch())

    def value(self) -> List[Any]:
        """Last delivered snapshot while observed, otherwise a fresh fetch."""
        if self._observers <= 0 or self._last is None:
            return self.first()
        return list(self._last)

    # ---- subscriptions
    def observe(self, callback: Callable[[List[Any]], None]) -> Callable[[], None]:
        self.changed.connect(callback)
        self._observers += 1
        self._db.tracker.retain(self)
        snapshot = self.first()
        self._last = snapshot
        callback(list(snapshot))

        disposed = False

        def dispose() -> None:
            nonlocal disposed
            if disposed:
                return
            disposed = True
            self._observers -= 1
            self.changed.disconnect(callback)
            if self._observers <= 0:
                self._db.tracker.release(self)

        return dispose

    def map(self, fn: Callable[[List[Any]], List[Any]], extra_tables: Iterable[str] = (), *, name: str | None = None) -> "LiveQuery":
        """Derived query: fn applied to every snapshot, also re-run when extra_tables change."""
        source = self._fetch
        return LiveQuery(
            self._db,
            self._tables | frozenset(extra_tables),
            lambda: fn(list(source())),
            name=name or f"{self._name}+mapped",
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._db.tracker.release(self)
        self._db.tracker.tablesInvalidated.disconnect(self._on_tables_invalidated)

    # ---- internals
    @Slot(list)
    def _on_tables_invalidated(self, tables: list) -> None:
        if self._closed or self._observers <= 0:
            return
        if self._tables.isdisjoint(tables):
            return
        snapshot = self.first()
        self._last = snapshot
        logger.debug("LiveQuery %s re-emits %d rows after %s", self._name, len(snapshot), tables)
        self.changed.emit(list(snapshot))
