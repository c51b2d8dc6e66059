# src/taskboard/tasks/detail.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from .comment_store import CommentStore
from .models import Denied, Task, TaskDetail
from .task_store import TaskStore

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = "%d/%m/%Y"


def format_created(created_at: float, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """Local-time display date for a stored epoch timestamp."""
    return datetime.fromtimestamp(float(created_at)).strftime(date_format)


class TaskDetailResolver:
    """
    One-shot resolution of a public task and its whole comment thread.

    Store failures propagate: the page either resolves completely or not at all.
    """

    def __init__(
        self,
        task_store: TaskStore,
        comment_store: CommentStore,
        *,
        date_format: str = DEFAULT_DATE_FORMAT,
    ) -> None:
        self._task_store = task_store
        self._comment_store = comment_store
        self._date_format = date_format

    async def resolve(self, task_id: str) -> TaskDetail | Denied:
        if not task_id:
            return Denied(task_id="", reason="not_found")

        task, comments = await asyncio.gather(
            asyncio.to_thread(self._task_store.get, task_id),
            asyncio.to_thread(self._comment_store.list_for_task, task_id),
        )

        if task is None:
            logger.info("Task detail denied id=%s reason=not_found", task_id)
            return Denied(task_id=task_id, reason="not_found")
        if not task.is_public:
            logger.info("Task detail denied id=%s reason=not_public", task_id)
            return Denied(task_id=task_id, reason="not_public")

        return self._snapshot(task, comments)

    def _snapshot(self, task: Task, comments) -> TaskDetail:
        return TaskDetail(
            task_id=task.id,
            text=task.text,
            owner=task.owner,
            is_public=task.is_public,
            created=format_created(task.created_at, self._date_format),
            comments=tuple(comments),
        )
