# Rev 0.3.0
from __future__ import annotations

from typing import List, Optional

from ..models.entities import Category
from ..models.types import CATEGORIES, TASKS
from .db import Database


class SQLiteCategoryRepository:
    """
    Category CRUD. Deleting a category clears tasks.category_id
    (ON DELETE SET NULL) instead of removing the tasks.
    """

    def __init__(self, db: Database):
        self._db = db

    def insert_category(self, category: Category) -> int:
        if category.id:
            cur = self._db.write(
                "INSERT INTO categories(id, name, color) VALUES (?, ?, ?)",
                (category.id, category.name, category.color),
                tables=(CATEGORIES,),
            )
        else:
            cur = self._db.write(
                "INSERT INTO categories(name, color) VALUES (?, ?)",
                (category.name, category.color),
                tables=(CATEGORIES,),
            )
        return int(cur.lastrowid)

    def update_category(self, category: Category) -> bool:
        cur = self._db.write(
            "UPDATE categories SET name = ?, color = ? WHERE id = ?",
            (category.name, category.color, category.id),
            tables=(CATEGORIES,),
        )
        return cur.rowcount > 0

    def delete_category(self, category_id: int) -> bool:
        cur = self._db.write(
            "DELETE FROM categories WHERE id = ?",
            (category_id,),
            tables=(CATEGORIES, TASKS),
        )
        return cur.rowcount > 0

    def get_category(self, category_id: int) -> Optional[Category]:
        row = self._db.fetchone("SELECT id, name, color FROM categories WHERE id = ?", (category_id,))
        return Category(id=row[0], name=row[1], color=row[2]) if row else None

    def list_categories(self) -> List[Category]:
        rows = self._db.fetchall("SELECT id, name, color FROM categories ORDER BY id")
        return [Category(id=r[0], name=r[1], color=r[2]) for r in rows]
