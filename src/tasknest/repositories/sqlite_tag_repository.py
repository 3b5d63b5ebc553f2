# Rev 0.3.0

# tasknest – SQLiteTagRepository (Rev 0.3.0)
# Tags are matched by name in application logic; ids are only storage keys.

from __future__ import annotations
from typing import List, Optional

from ..models.entities import Tag
from ..models.types import TAGS, TASK_TAGS
from .db import Database


class SQLiteTagRepository:
    """
    Thin wrapper around the 'tags' table.
    Schema: tags(id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL)
    """

    def __init__(self, db: Database):
        self._db = db

    # --- public API ---------------------------------------------------------

    def insert_tag(self, tag: Tag) -> int:
        if tag.id:
            cur = self._db.write("INSERT INTO tags(id, name) VALUES (?, ?)", (tag.id, tag.name), tables=(TAGS,))
        else:
            cur = self._db.write("INSERT INTO tags(name) VALUES (?)", (tag.name,), tables=(TAGS,))
        return int(cur.lastrowid)

    def update_tag(self, tag: Tag) -> bool:
        cur = self._db.write("UPDATE tags SET name = ? WHERE id = ?", (tag.name, tag.id), tables=(TAGS,))
        return cur.rowcount > 0

    def delete_tag(self, tag_id: int) -> bool:
        """Removes the tag and, by cascade, every association that references it."""
        cur = self._db.write("DELETE FROM tags WHERE id = ?", (tag_id,), tables=(TAGS, TASK_TAGS))
        return cur.rowcount > 0

    def list_tags(self) -> List[Tag]:
        rows = self._db.fetchall("SELECT id, name FROM tags ORDER BY id")
        return [Tag(id=r[0], name=r[1]) for r in rows]

    def get_tag(self, tag_id: int) -> Optional[Tag]:
        row = self._db.fetchone("SELECT id, name FROM tags WHERE id = ?", (tag_id,))
        return Tag(id=row[0], name=row[1]) if row else None

    def find_by_name(self, name: str) -> Optional[Tag]:
        row = self._db.fetchone("SELECT id, name FROM tags WHERE name = ? ORDER BY id LIMIT 1", (name,))
        return Tag(id=row[0], name=row[1]) if row else None
