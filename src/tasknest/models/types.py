# tasknest type definitions
# Rev 0.2.0

from __future__ import annotations
from enum import Enum

# Storage tables observed by live queries
TASKS = "tasks"
TAGS = "tags"
TASK_TAGS = "task_tags"
CATEGORIES = "categories"
ALL_TABLES = (TASKS, TAGS, TASK_TAGS, CATEGORIES)


class TaskSortOrder(str, Enum):
    NEWEST = "newest"       # id DESC
    TITLE = "title"         # title ASC
    DEADLINE = "deadline"   # deadline ASC, NULLs last
