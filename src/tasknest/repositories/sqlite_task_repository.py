# Rev 0.3.0
from __future__ import annotations

import sqlite3
from typing import Any, List, Optional, Sequence, Tuple, Union

from ..models.entities import Task
from ..models.types import TASKS, TASK_TAGS, TaskSortOrder
from .db import Database


_COLUMNS = "id, title, description, is_completed, category_id, timestamp, deadline"

_ORDER_BY = {
    TaskSortOrder.NEWEST: "id DESC",
    TaskSortOrder.TITLE: "title ASC, id ASC",
    # NULL deadlines sort after every real deadline
    TaskSortOrder.DEADLINE: "deadline IS NULL, deadline ASC, id ASC",
}


class SQLiteTaskRepository:
    """
    Task CRUD + partitioned listings used by the live queries.

    update/delete never raise for an unknown id: they return False,
    meaning the statement affected zero rows.
    """

    def __init__(self, db: Database):
        self._db = db

    @staticmethod
    def _row_to_task(row: Union[sqlite3.Row, Tuple]) -> Task:
        return Task(
            id=row[0],
            title=row[1],
            description=row[2] or "",
            is_completed=bool(row[3]),
            category_id=row[4],
            timestamp=row[5],
            deadline=row[6],
        )

    # -------------------------
    # CRUD
    # -------------------------
    def insert_task(self, task: Task) -> int:
        params = (
            task.title,
            task.description or "",
            int(bool(task.is_completed)),
            task.category_id,
            task.timestamp,
            task.deadline,
        )
        if task.id:
            cur = self._db.write(
                f"INSERT INTO tasks({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (task.id, *params),
                tables=(TASKS,),
            )
        else:
            cur = self._db.write(
                "INSERT INTO tasks(title, description, is_completed, category_id, timestamp, deadline) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                params,
                tables=(TASKS,),
            )
        return int(cur.lastrowid)

    def update_task(self, task: Task) -> bool:
        if task.id is None:
            return False
        cur = self._db.write(
            """
            UPDATE tasks
               SET title = ?, description = ?, is_completed = ?,
                   category_id = ?, timestamp = ?, deadline = ?
             WHERE id = ?
            """,
            (
                task.title,
                task.description or "",
                int(bool(task.is_completed)),
                task.category_id,
                task.timestamp,
                task.deadline,
                task.id,
            ),
            tables=(TASKS,),
        )
        return cur.rowcount > 0

    def set_completed(self, task_id: int, completed: bool) -> bool:
        cur = self._db.write(
            "UPDATE tasks SET is_completed = ? WHERE id = ?",
            (int(bool(completed)), task_id),
            tables=(TASKS,),
        )
        return cur.rowcount > 0

    def delete_task(self, task_id: int) -> bool:
        # task_tags rows go with it (ON DELETE CASCADE)
        cur = self._db.write("DELETE FROM tasks WHERE id = ?", (task_id,), tables=(TASKS, TASK_TAGS))
        return cur.rowcount > 0

    def delete_all(self) -> int:
        cur = self._db.write("DELETE FROM tasks", tables=(TASKS, TASK_TAGS))
        return max(cur.rowcount, 0)

    def get_task(self, task_id: int) -> Optional[Task]:
        row = self._db.fetchone(f"SELECT {_COLUMNS} FROM tasks WHERE id = ?", (task_id,))
        return self._row_to_task(row) if row else None

    # -------------------------
    # Listings
    # -------------------------
    def list_tasks(
        self,
        *,
        completed: Optional[bool] = None,
        order: TaskSortOrder = TaskSortOrder.NEWEST,
        search: Optional[str] = None,
        deadline_from: Optional[int] = None,
    ) -> List[Task]:
        where: List[str] = []
        params: List[Any] = []
        if completed is not None:
            where.append("is_completed = ?")
            params.append(int(completed))
        if search:
            # case-insensitive substring on the title (see DESIGN.md)
            where.append("instr(casefold(title), ?) > 0")
            params.append(search.casefold())
        if deadline_from is not None:
            where.append("deadline >= ?")
            params.append(deadline_from)
        clause = f"WHERE {' AND '.join(where)}" if where else ""
        rows = self._db.fetchall(
            f"SELECT {_COLUMNS} FROM tasks {clause} ORDER BY {_ORDER_BY[TaskSortOrder(order)]}",
            params,
        )
        return [self._row_to_task(r) for r in rows]

    def count_tasks(self, *, completed: Optional[bool] = None) -> int:
        if completed is None:
            row = self._db.fetchone("SELECT COUNT(1) FROM tasks")
        else:
            row = self._db.fetchone("SELECT COUNT(1) FROM tasks WHERE is_completed = ?", (int(completed),))
        return int(row[0]) if row and row[0] is not None else 0

    def max_active_id(self) -> int:
        row = self._db.fetchone("SELECT MAX(id) FROM tasks WHERE is_completed = 0")
        return int(row[0]) if row and row[0] is not None else 0

    def insert_many(self, tasks: Sequence[Task]) -> List[int]:
        with self._db.transaction():
            return [self.insert_task(t) for t in tasks]
