# Rev 0.3.0
"""Lightweight entities aligned with schema Rev 0.3.0 (tasks, tags, task_tags, categories)"""
from __future__ import annotations
import time
from dataclasses import dataclass, field
from typing import List, Optional


def now_millis() -> int:
    return int(time.time() * 1000)


@dataclass
class Task:
    id: Optional[int] = None
    title: str = ""
    description: str = ""
    is_completed: bool = False
    category_id: Optional[int] = None
    timestamp: Optional[int] = field(default_factory=now_millis)   # creation, epoch ms
    deadline: Optional[int] = None                                 # epoch ms


@dataclass
class Tag:
    id: Optional[int]
    name: str


@dataclass(frozen=True)
class TaskTagCrossRef:
    task_id: int
    tag_id: int


@dataclass
class Category:
    id: Optional[int]
    name: str
    color: str          # "#RRGGBB"


@dataclass(frozen=True)
class TaskWithTags:
    """Display row: a task plus the names of its tags, joined at read time."""
    task: Task
    tags: List[str] = field(default_factory=list)


@dataclass
class BackupData:
    tasks: List[Task]
    categories: List[Category]
    export_date: str
