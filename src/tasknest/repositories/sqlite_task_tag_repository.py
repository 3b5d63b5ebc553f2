# Rev 0.3.0
from __future__ import annotations

from typing import Dict, Iterable, List

from ..models.entities import Tag, TaskTagCrossRef
from ..models.types import TASK_TAGS
from .db import Database


class SQLiteTaskTagRepository:
    """
    Many-to-many links between tasks and tags.

    Schema expectation:

      task_tags(
        task_id INTEGER NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
        tag_id  INTEGER NOT NULL REFERENCES tags(id)  ON DELETE CASCADE,
        PRIMARY KEY (task_id, tag_id)
      )

    Inserting a duplicate pair or a pair whose task/tag does not exist raises
    sqlite3.IntegrityError.
    """

    def __init__(self, db: Database):
        self._db = db

    def insert_task_tag(self, ref: TaskTagCrossRef) -> None:
        self._db.write(
            "INSERT INTO task_tags(task_id, tag_id) VALUES (?, ?)",
            (ref.task_id, ref.tag_id),
            tables=(TASK_TAGS,),
        )

    def delete_task_tag(self, ref: TaskTagCrossRef) -> bool:
        cur = self._db.write(
            "DELETE FROM task_tags WHERE task_id = ? AND tag_id = ?",
            (ref.task_id, ref.tag_id),
            tables=(TASK_TAGS,),
        )
        return cur.rowcount > 0

    def delete_all_tags_for_task(self, task_id: int) -> int:
        cur = self._db.write("DELETE FROM task_tags WHERE task_id = ?", (task_id,), tables=(TASK_TAGS,))
        return max(cur.rowcount, 0)

    def get_task_tags(self, task_id: int) -> List[TaskTagCrossRef]:
        rows = self._db.fetchall(
            "SELECT task_id, tag_id FROM task_tags WHERE task_id = ? ORDER BY tag_id",
            (task_id,),
        )
        return [TaskTagCrossRef(task_id=r[0], tag_id=r[1]) for r in rows]

    def get_tags_for_task(self, task_id: int) -> List[Tag]:
        rows = self._db.fetchall(
            """
            SELECT t.id, t.name
              FROM tags t
              JOIN task_tags tt ON t.id = tt.tag_id
             WHERE tt.task_id = ?
             ORDER BY t.id
            """,
            (task_id,),
        )
        return [Tag(id=r[0], name=r[1]) for r in rows]

    def tag_names_for_tasks(self, task_ids: Iterable[int]) -> Dict[int, List[str]]:
        """One round trip for a whole list screen: {task_id: [tag names in tag id order]}."""
        ids = list(task_ids)
        out: Dict[int, List[str]] = {tid: [] for tid in ids}
        if not ids:
            return out
        marks = ", ".join("?" for _ in ids)
        rows = self._db.fetchall(
            f"""
            SELECT tt.task_id, t.name
              FROM task_tags tt
              JOIN tags t ON t.id = tt.tag_id
             WHERE tt.task_id IN ({marks})
             ORDER BY tt.task_id, t.id
            """,
            ids,
        )
        for r in rows:
            out[r[0]].append(r[1])
        return out

    def count_for_tag(self, tag_id: int) -> int:
        row = self._db.fetchone("SELECT COUNT(1) FROM task_tags WHERE tag_id = ?", (tag_id,))
        return int(row[0]) if row else 0
