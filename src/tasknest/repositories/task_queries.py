# Rev 0.3.0
# Query shapes served to the list screen, the completed screen, search and the widget.
from __future__ import annotations

from typing import Optional

from ..models.types import TASKS, TaskSortOrder
from .db import Database
from .live_query import LiveQuery
from .sqlite_task_repository import SQLiteTaskRepository


class TaskQueries:
    """Factory for live task queries. Every query depends on the tasks table only."""

    def __init__(self, db: Database, tasks_repo: SQLiteTaskRepository):
        self._db = db
        self._tasks = tasks_repo

    def tasks(
        self,
        *,
        completed: bool,
        order: TaskSortOrder = TaskSortOrder.NEWEST,
        search: Optional[str] = None,
    ) -> LiveQuery:
        order = TaskSortOrder(order)
        part = "completed" if completed else "active"
        name = f"{part}:{order.value}" + (f":search={search!r}" if search else "")
        return LiveQuery(
            self._db,
            (TASKS,),
            lambda: self._tasks.list_tasks(completed=completed, order=order, search=search),
            name=name,
        )

    # ---- active
    def active_tasks(self) -> LiveQuery:
        return self.tasks(completed=False, order=TaskSortOrder.NEWEST)

    def active_tasks_sorted_by_title(self) -> LiveQuery:
        return self.tasks(completed=False, order=TaskSortOrder.TITLE)

    def active_tasks_sorted_by_date(self) -> LiveQuery:
        return self.tasks(completed=False, order=TaskSortOrder.DEADLINE)

    # ---- completed
    def completed_tasks(self) -> LiveQuery:
        return self.tasks(completed=True, order=TaskSortOrder.NEWEST)

    def completed_tasks_sorted_by_title(self) -> LiveQuery:
        return self.tasks(completed=True, order=TaskSortOrder.TITLE)

    def completed_tasks_sorted_by_date(self) -> LiveQuery:
        return self.tasks(completed=True, order=TaskSortOrder.DEADLINE)

    # ---- search
    def search_active_tasks_by_date(self, text: str) -> LiveQuery:
        return self.tasks(completed=False, order=TaskSortOrder.DEADLINE, search=text)

    def search_active_tasks_by_title(self, text: str) -> LiveQuery:
        return self.tasks(completed=False, order=TaskSortOrder.TITLE, search=text)

    def search_completed_tasks_by_date(self, text: str) -> LiveQuery:
        return self.tasks(completed=True, order=TaskSortOrder.DEADLINE, search=text)

    def search_completed_tasks_by_title(self, text: str) -> LiveQuery:
        return self.tasks(completed=True, order=TaskSortOrder.TITLE, search=text)

    # ---- calendar
    def tasks_from_date(self, start_millis: int) -> LiveQuery:
        """Tasks of both partitions with deadline >= start, earliest first."""
        return LiveQuery(
            self._db,
            (TASKS,),
            lambda: self._tasks.list_tasks(order=TaskSortOrder.DEADLINE, deadline_from=start_millis),
            name=f"from:{start_millis}",
        )
