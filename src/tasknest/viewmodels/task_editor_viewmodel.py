# Rev 0.3.0
# src/tasknest/viewmodels/task_editor_viewmodel.py
from __future__ import annotations

import logging
from typing import List, Optional, Set

from PySide6.QtCore import QObject, Signal

from ..errors import TaskValidationError, validate_title
from ..models.entities import Tag, Task
from ..services.default_tags import ensure_default_tags
from ..services.task_repository import TaskRepository

logger = logging.getLogger(__name__)


class TaskEditorViewModel(QObject):
    """
    VM for the add/edit task form.
    Emits:
      - tagsLoaded(tags: list[Tag])      chips to show, defaults created on demand
      - titleError(message: str)        inline field error, nothing was written
      - saved(task_id: int)
      - notice(message: str)
    """

    tagsLoaded = Signal(object)
    titleError = Signal(str)
    saved = Signal(int)
    notice = Signal(str)

    def __init__(self, repo: TaskRepository):
        super().__init__()
        self._repo = repo
        self._task: Optional[Task] = None
        self._tags: List[Tag] = []
        self._selected: Set[int] = set()

    @property
    def editing(self) -> Optional[Task]:
        return self._task

    @property
    def tags(self) -> List[Tag]:
        return list(self._tags)

    @property
    def selected_tag_ids(self) -> Set[int]:
        return set(self._selected)

    def load(self, task_id: Optional[int] = None) -> None:
        self._task = self._repo.get_task(task_id) if task_id is not None else None
        self._tags = ensure_default_tags(self._repo)
        self._selected = set()
        if self._task is not None:
            self._selected = {ref.tag_id for ref in self._repo.get_task_tags_for_edit(self._task.id)}
        self.tagsLoaded.emit(list(self._tags))

    def set_tag_selected(self, tag_id: int, selected: bool) -> None:
        if selected:
            self._selected.add(tag_id)
        else:
            self._selected.discard(tag_id)

    def save(
        self,
        *,
        title: str,
        description: str = "",
        deadline: Optional[int] = None,
        category_id: Optional[int] = None,
    ) -> Optional[int]:
        try:
            clean_title = validate_title(title)
        except TaskValidationError as e:
            self.titleError.emit(e.message)
            return None

        if self._task is not None:
            task = Task(
                id=self._task.id,
                title=clean_title,
                description=description.strip(),
                is_completed=self._task.is_completed,
                category_id=category_id,
                timestamp=self._task.timestamp,
                deadline=deadline,
            )
        else:
            task = Task(title=clean_title, description=description.strip(), category_id=category_id, deadline=deadline)

        # keep tag id order stable for the join
        tag_ids = sorted(self._selected)
        try:
            task_id = self._repo.save_task_with_tags(task, tag_ids)
        except Exception:
            logger.exception("Saving task %r failed", clean_title)
            self.notice.emit("Could not save the task")
            return None

        self._task = self._repo.get_task(task_id)
        self.saved.emit(task_id)
        self.notice.emit("Task updated" if task.id else "Task added")
        return task_id
