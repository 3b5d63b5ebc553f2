# Rev 0.3.0
from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Union

from ..models.entities import BackupData, Category, Tag, Task, TaskTagCrossRef, TaskWithTags
from ..models.types import CATEGORIES, TAGS, TASK_TAGS, TaskSortOrder
from ..repositories.db import Database
from ..repositories.live_query import LiveQuery
from ..repositories.sqlite_category_repository import SQLiteCategoryRepository
from ..repositories.sqlite_tag_repository import SQLiteTagRepository
from ..repositories.sqlite_task_repository import SQLiteTaskRepository
from ..repositories.sqlite_task_tag_repository import SQLiteTaskTagRepository
from ..repositories.task_queries import TaskQueries

logger = logging.getLogger(__name__)

ChangeListener = Callable[[], None]


class TaskRepository:
    """
    Single write path for the app: wraps the per-table repositories and the
    live queries, joins tag names onto tasks at read time, and pings change
    listeners (the home-screen widget) after every mutation of task data.
    """

    def __init__(self, db: Database):
        self._db = db
        self._tasks = SQLiteTaskRepository(db)
        self._tags = SQLiteTagRepository(db)
        self._task_tags = SQLiteTaskTagRepository(db)
        self._categories = SQLiteCategoryRepository(db)
        self.queries = TaskQueries(db, self._tasks)
        self._listeners: List[ChangeListener] = []

        self._all_active: Optional[LiveQuery] = None
        self._all_completed: Optional[LiveQuery] = None

    @property
    def db(self) -> Database:
        return self._db

    # -------------------------
    # Live reads
    # -------------------------
    @property
    def all_active_tasks(self) -> LiveQuery:
        if self._all_active is None:
            self._all_active = self.queries.active_tasks()
        return self._all_active

    @property
    def all_completed_tasks(self) -> LiveQuery:
        if self._all_completed is None:
            self._all_completed = self.queries.completed_tasks()
        return self._all_completed

    def tasks_view(
        self,
        *,
        completed: bool,
        order: TaskSortOrder = TaskSortOrder.NEWEST,
        search: Optional[str] = None,
    ) -> LiveQuery:
        return self.queries.tasks(completed=completed, order=order, search=(search or None))

    def get_tasks_by_date(self, start_millis: int) -> LiveQuery:
        return self.queries.tasks_from_date(start_millis)

    def with_tags(self, query: LiveQuery) -> LiveQuery:
        """Derived live query of TaskWithTags, also refreshed when tags or links change."""
        return query.map(self.attach_tags, (TAGS, TASK_TAGS), name=f"{query.name}+tags")

    def attach_tags(self, tasks: List[Task]) -> List[TaskWithTags]:
        names = self._task_tags.tag_names_for_tasks(t.id for t in tasks if t.id is not None)
        return [TaskWithTags(task=t, tags=names.get(t.id, [])) for t in tasks]

    def get_all_tags(self) -> LiveQuery:
        return LiveQuery(self._db, (TAGS,), self._tags.list_tags, name="tags")

    def get_all_categories(self) -> LiveQuery:
        return LiveQuery(self._db, (CATEGORIES,), self._categories.list_categories, name="categories")

    # -------------------------
    # Tasks
    # -------------------------
    def insert(self, task: Task) -> int:
        task_id = self._tasks.insert_task(task)
        self._notify_listeners()
        return task_id

    def update(self, task: Task) -> bool:
        ok = self._tasks.update_task(task)
        if ok:
            self._notify_listeners()
        return ok

    def set_completed(self, task_id: int, completed: bool) -> bool:
        ok = self._tasks.set_completed(task_id, completed)
        if ok:
            self._notify_listeners()
        return ok

    def delete(self, task: Union[Task, int]) -> bool:
        task_id = task.id if isinstance(task, Task) else task
        if task_id is None:
            return False
        ok = self._tasks.delete_task(task_id)
        if ok:
            self._notify_listeners()
        return ok

    def delete_all(self) -> int:
        removed = self._tasks.delete_all()
        self._notify_listeners()
        return removed

    def get_task(self, task_id: int) -> Optional[Task]:
        return self._tasks.get_task(task_id)

    def get_last_task_id(self) -> int:
        """Newest active task id, 0 when there is none."""
        return self._tasks.max_active_id()

    def count_tasks(self, *, completed: Optional[bool] = None) -> int:
        return self._tasks.count_tasks(completed=completed)

    def save_task_with_tags(self, task: Task, tag_ids: Iterable[int]) -> int:
        """
        Insert (no id) or update (id set) a task and make its tag set exactly
        tag_ids, as one transaction.
        """
        wanted = list(dict.fromkeys(tag_ids))
        with self._db.transaction():
            if task.id:
                if not self._tasks.update_task(task):
                    raise LookupError(f"task {task.id} does not exist")
                task_id = task.id
            else:
                task_id = self._tasks.insert_task(task)
            self._replace_links(task_id, wanted)
        self._notify_listeners()
        return task_id

    def import_backup(self, data: BackupData) -> int:
        """
        Insert-only import: every task gets a fresh id, so importing the
        same file twice duplicates rows. Unknown category refs are dropped.
        """
        known = {c.id for c in self._categories.list_categories()}
        with self._db.transaction():
            for t in data.tasks:
                self._tasks.insert_task(
                    Task(
                        id=None,
                        title=t.title,
                        description=t.description,
                        is_completed=t.is_completed,
                        category_id=t.category_id if t.category_id in known else None,
                        timestamp=t.timestamp,
                        deadline=t.deadline,
                    )
                )
        if data.tasks:
            self._notify_listeners()
        return len(data.tasks)

    # -------------------------
    # Tags
    # -------------------------
    def insert_tag(self, tag: Tag) -> int:
        return self._tags.insert_tag(tag)

    def delete_tag(self, tag_id: int) -> bool:
        linked = self._task_tags.count_for_tag(tag_id)
        ok = self._tags.delete_tag(tag_id)
        if ok and linked:
            self._notify_listeners()
        return ok

    def list_tags(self) -> List[Tag]:
        return self._tags.list_tags()

    def find_tag_by_name(self, name: str) -> Optional[Tag]:
        return self._tags.find_by_name(name)

    def insert_task_tag(self, ref: TaskTagCrossRef) -> None:
        self._task_tags.insert_task_tag(ref)
        self._notify_listeners()

    def get_task_tags_for_edit(self, task_id: int) -> List[TaskTagCrossRef]:
        return self._task_tags.get_task_tags(task_id)

    def tags_for_task(self, task_id: int) -> List[Tag]:
        return self._task_tags.get_tags_for_task(task_id)

    def delete_task_tags(self, task_id: int) -> int:
        removed = self._task_tags.delete_all_tags_for_task(task_id)
        if removed:
            self._notify_listeners()
        return removed

    def replace_task_tags(self, task_id: int, tag_ids: Iterable[int]) -> None:
        """Delete every link of the task then insert tag_ids, all or nothing."""
        wanted = list(dict.fromkeys(tag_ids))
        with self._db.transaction():
            self._replace_links(task_id, wanted)
        self._notify_listeners()

    def get_tag_name_by_id(self, tag_id: int) -> Optional[str]:
        # a link may outlive its tag for a moment; that is not an error
        tag = self._tags.get_tag(tag_id)
        return tag.name if tag else None

    def _replace_links(self, task_id: int, tag_ids: List[int]) -> None:
        self._task_tags.delete_all_tags_for_task(task_id)
        for tag_id in tag_ids:
            self._task_tags.insert_task_tag(TaskTagCrossRef(task_id=task_id, tag_id=tag_id))

    # -------------------------
    # Categories
    # -------------------------
    def insert_category(self, category: Category) -> int:
        return self._categories.insert_category(category)

    def update_category(self, category: Category) -> bool:
        return self._categories.update_category(category)

    def delete_category(self, category_id: int) -> bool:
        ok = self._categories.delete_category(category_id)
        if ok:
            # dependent tasks lost their category reference
            self._notify_listeners()
        return ok

    def list_categories(self) -> List[Category]:
        return self._categories.list_categories()

    # -------------------------
    # External change listeners (widget refresh)
    # -------------------------
    def add_change_listener(self, listener: ChangeListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_change_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def update_widget(self) -> None:
        self._notify_listeners()

    def _notify_listeners(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Change listener %r failed", listener)
