# src/tasknest/services/default_tags.py
# Well-known tags offered by the task editor, created on first use.

from __future__ import annotations

import logging
from typing import List, Sequence

from ..models.entities import Tag
from .task_repository import TaskRepository

logger = logging.getLogger(__name__)

POPULAR_TAGS: Sequence[str] = (
    "🏢 Work",
    "🏠 Home",
    "⭐ Urgent",
    "🔴 Important",
    "📚 Learning",
    "🏋️ Health",
    "🛒 Shopping",
    "🤝 Social",
)


def ensure_default_tags(repo: TaskRepository, names: Sequence[str] = POPULAR_TAGS) -> List[Tag]:
    """Return the default tags in catalogue order, inserting the ones missing by name."""
    existing = {}
    for tag in repo.list_tags():
        existing.setdefault(tag.name, tag)

    out: List[Tag] = []
    for name in names:
        tag = existing.get(name)
        if tag is None:
            tag = Tag(id=repo.insert_tag(Tag(id=None, name=name)), name=name)
            existing[name] = tag
            logger.info("Created default tag %r (id=%s)", name, tag.id)
        out.append(tag)
    return out
