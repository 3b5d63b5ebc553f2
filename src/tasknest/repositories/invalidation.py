# Rev 0.3.0
from __future__ import annotations

import threading
from typing import Dict, Iterable, Set

from PySide6.QtCore import QObject, Signal

from ..models.types import ALL_TABLES


class InvalidationTracker(QObject):
    """
    Per-table change versions for the storage engine.

    Every committed write bumps the version of each table it touched and
    emits tablesInvalidated(list[str]). Live queries listen to this signal
    and recompute when one of their tables is in the list.
    """

    tablesInvalidated = Signal(list)

    def __init__(self, tables: Iterable[str] = ALL_TABLES):
        super().__init__()
        self._lock = threading.Lock()
        self._versions: Dict[str, int] = {t: 0 for t in tables}
        # observed queries; the signal connection alone does not keep them alive
        self._live: Set[QObject] = set()

    def version(self, table: str) -> int:
        with self._lock:
            return self._versions.get(table, 0)

    def versions(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._versions)

    def retain(self, query: QObject) -> None:
        with self._lock:
            self._live.add(query)

    def release(self, query: QObject) -> None:
        with self._lock:
            self._live.discard(query)

    @property
    def live_count(self) -> int:
        with self._lock:
            return len(self._live)

    def invalidate(self, *tables: str) -> None:
        names = sorted({t for t in tables if t})
        if not names:
            return
        with self._lock:
            for t in names:
                self._versions[t] = self._versions.get(t, 0) + 1
        self.tablesInvalidated.emit(names)

    def invalidate_all(self) -> None:
        self.invalidate(*self._versions.keys())
