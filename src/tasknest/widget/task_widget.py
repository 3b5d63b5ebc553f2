# Rev 0.3.0
"""Home-screen widget bridge.

TaskWidgetProvider owns the set of live widget instances and broadcasts
dataChanged to all of them. Each instance is backed by a
TaskWidgetDataSource that reloads the active-task list with a blocking
fetch on its own single-thread pool, never on the UI thread.
"""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from PySide6.QtCore import QCoreApplication, QObject, QRunnable, QThread, QThreadPool, Signal

from ..errors import WrongThreadError
from ..models.entities import Task
from ..repositories.live_query import LiveQuery

logger = logging.getLogger(__name__)


def on_ui_thread() -> bool:
    app = QCoreApplication.instance()
    return app is not None and QThread.currentThread() == app.thread()


@dataclass(frozen=True)
class WidgetItem:
    item_id: int
    title: str
    description: str


class _Reload(QRunnable):
    def __init__(self, source: "TaskWidgetDataSource"):
        super().__init__()
        self._source = source

    def run(self) -> None:
        try:
            self._source.on_data_set_changed()
        except Exception:
            logger.exception("Widget reload failed")


class TaskWidgetDataSource(QObject):
    """Row factory for one widget instance (list of active tasks)."""

    reloaded = Signal(int)      # row count

    def __init__(self, query: LiveQuery):
        super().__init__()
        self._query = query
        self._tasks: List[Task] = []
        self.pool = QThreadPool()
        self.pool.setMaxThreadCount(1)

    # ---- lifecycle
    def on_create(self) -> None:
        self.on_data_set_changed()

    def on_data_set_changed(self) -> None:
        if on_ui_thread():
            raise WrongThreadError("widget data must be loaded off the UI thread")
        self._tasks = self._query.first()
        self.reloaded.emit(len(self._tasks))

    def request_reload(self) -> None:
        self.pool.start(_Reload(self))

    def on_destroy(self) -> None:
        self.pool.waitForDone()
        self._tasks = []

    # ---- rows
    def count(self) -> int:
        return len(self._tasks)

    def view_at(self, position: int) -> WidgetItem:
        task = self._tasks[position]
        return WidgetItem(item_id=int(task.id or 0), title=task.title, description=task.description)

    def item_id(self, position: int) -> int:
        return int(self._tasks[position].id or 0)

    def has_stable_ids(self) -> bool:
        return True


class TaskWidgetProvider(QObject):
    dataChanged = Signal()

    def __init__(self, query: LiveQuery):
        super().__init__()
        self._query = query
        self._ids = itertools.count(1)
        self._instances: Dict[int, TaskWidgetDataSource] = {}
        self.dataChanged.connect(self._reload_all)

    def add_widget(self) -> int:
        widget_id = next(self._ids)
        source = TaskWidgetDataSource(self._query)
        self._instances[widget_id] = source
        source.request_reload()
        logger.info("Widget %d added", widget_id)
        return widget_id

    def remove_widget(self, widget_id: int) -> None:
        source = self._instances.pop(widget_id, None)
        if source is not None:
            source.on_destroy()

    def widget_ids(self) -> List[int]:
        return list(self._instances)

    def data_source(self, widget_id: int) -> Optional[TaskWidgetDataSource]:
        return self._instances.get(widget_id)

    def notify_app_widget_view_data_changed(self) -> None:
        """Tell every widget instance its list data changed."""
        self.dataChanged.emit()

    def wait_for_idle(self) -> None:
        for source in self._instances.values():
            source.pool.waitForDone()

    def _reload_all(self) -> None:
        for source in self._instances.values():
            source.request_reload()
