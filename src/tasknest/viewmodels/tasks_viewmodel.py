# Rev 0.3.0
# live list for the task screen (active/completed, sort, search, date filter)
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from PySide6.QtCore import QObject, Signal

from ..models.entities import Task, TaskWithTags
from ..models.types import TaskSortOrder
from ..repositories.live_query import LiveQuery
from ..services.task_repository import TaskRepository

logger = logging.getLogger(__name__)


@dataclass
class _DeletedTask:
    task: Task
    tag_ids: List[int] = field(default_factory=list)


class TasksViewModel(QObject):
    """
    VM behind the list screen and the completed screen.
    Emits:
      - tasksReloaded(total: int, rows: list[TaskWithTags]) on every snapshot
      - notice(message: str) for snackbar-style messages
    """

    tasksReloaded = Signal(int, object)
    notice = Signal(str)

    def __init__(self, repo: TaskRepository):
        super().__init__()
        self._repo = repo
        self._show_completed = False
        self._order = TaskSortOrder.DEADLINE
        self._search: Optional[str] = None
        self._date_from: Optional[int] = None

        self._query: Optional[LiveQuery] = None
        self._dispose: Optional[Callable[[], None]] = None
        self._rows: List[TaskWithTags] = []
        self._last_deleted: Optional[_DeletedTask] = None

    # ---- filters
    @property
    def show_completed(self) -> bool:
        return self._show_completed

    @property
    def sort_order(self) -> TaskSortOrder:
        return self._order

    @property
    def rows(self) -> List[TaskWithTags]:
        return list(self._rows)

    def set_filters(
        self,
        *,
        show_completed: Optional[bool] = None,
        order: Optional[TaskSortOrder] = None,
        search: Optional[str] = None,
    ) -> None:
        if show_completed is not None:
            self._show_completed = show_completed
        if order is not None:
            self._order = TaskSortOrder(order)
        self._search = search or None
        self._date_from = None
        self._bind()

    def show_from_date(self, start_millis: int) -> None:
        """Calendar filter: tasks with deadline >= start, both partitions."""
        self._date_from = start_millis
        self._bind()

    def start(self) -> None:
        self._bind()

    def close(self) -> None:
        self._unbind()

    # ---- commands
    def set_completed(self, task_id: int, completed: bool) -> bool:
        try:
            ok = self._repo.set_completed(task_id, completed)
        except Exception:
            logger.exception("Could not change completion of task %s", task_id)
            self.notice.emit("Could not update the task")
            return False
        if ok:
            self.notice.emit("Task completed" if completed else "Task restored")
        return ok

    def delete_task(self, task_id: int) -> bool:
        try:
            task = self._repo.get_task(task_id)
            if task is None:
                return False
            tag_ids = [ref.tag_id for ref in self._repo.get_task_tags_for_edit(task_id)]
            ok = self._repo.delete(task_id)
        except Exception:
            logger.exception("Could not delete task %s", task_id)
            self.notice.emit("Could not delete the task")
            return False
        if ok:
            self._last_deleted = _DeletedTask(task=task, tag_ids=tag_ids)
            self.notice.emit("Task deleted")
        return ok

    def can_undo(self) -> bool:
        return self._last_deleted is not None

    def undo_delete(self) -> Optional[int]:
        """Put back the last deleted task (same id, same tags). Single level only."""
        pending, self._last_deleted = self._last_deleted, None
        if pending is None:
            return None
        try:
            task_id = self._repo.insert(pending.task)
            existing = {t.id for t in self._repo.list_tags()}
            tag_ids = [tid for tid in pending.tag_ids if tid in existing]
            if tag_ids:
                self._repo.replace_task_tags(task_id, tag_ids)
        except Exception:
            logger.exception("Undo of delete failed")
            self.notice.emit("Could not restore the task")
            return None
        self.notice.emit("Task restored")
        return task_id

    # ---- internals
    def _current_query(self) -> LiveQuery:
        if self._date_from is not None:
            base = self._repo.get_tasks_by_date(self._date_from)
        else:
            base = self._repo.tasks_view(completed=self._show_completed, order=self._order, search=self._search)
        return self._repo.with_tags(base)

    def _bind(self) -> None:
        self._unbind()
        self._query = self._current_query()
        self._dispose = self._query.observe(self._on_snapshot)

    def _unbind(self) -> None:
        if self._dispose is not None:
            self._dispose()
            self._dispose = None
        if self._query is not None:
            self._query.close()
            self._query = None

    def _on_snapshot(self, rows: List[TaskWithTags]) -> None:
        self._rows = rows
        self.tasksReloaded.emit(len(rows), rows)
