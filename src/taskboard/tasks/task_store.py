# src/taskboard/tasks/task_store.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..core.errors import PermissionDenied
from ..core.ports import Document, DocumentStore, Subscription
from .models import TASKS_COLLECTION, Task

logger = logging.getLogger(__name__)

TaskListener = Callable[[list[Task]], None]

_NEWEST_FIRST = (("created", "desc"),)


class TaskStore:
    """Typed access to the `tasks` collection."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    @staticmethod
    def _to_tasks(docs: list[Document]) -> list[Task]:
        return [Task.from_document(doc_id, fields) for doc_id, fields in docs]

    def create(
        self,
        *,
        owner: str,
        text: str,
        is_public: bool = False,
        created_at: float | None = None,
    ) -> Task:
        if not owner or not owner.strip():
            raise ValueError("owner is required")
        if not text or not text.strip():
            raise ValueError("text is required")

        task = Task(
            id="",
            text=text,
            owner=owner,
            created_at=time.time() if created_at is None else float(created_at),
            is_public=bool(is_public),
        )
        task_id = self._store.create(TASKS_COLLECTION, task.to_document())
        logger.debug("Task added id=%s owner=%s public=%s", task_id, owner, is_public)
        return Task.from_document(task_id, task.to_document())

    def get(self, task_id: str) -> Task | None:
        fields = self._store.get_by_id(TASKS_COLLECTION, task_id)
        return Task.from_document(task_id, fields) if fields is not None else None

    def delete(self, task_id: str, *, requester_email: str | None = None) -> None:
        """
        Delete a task.

        When requester_email is given the stored owner must match it, otherwise
        PermissionDenied is raised and nothing is deleted. A missing task is a no-op.
        """
        if requester_email is not None:
            task = self.get(task_id)
            if task is None:
                return
            if task.owner != requester_email:
                raise PermissionDenied(
                    f"{requester_email} does not own task {task_id}"
                )

        self._store.delete_by_id(TASKS_COLLECTION, task_id)
        logger.debug("Task deleted id=%s", task_id)

    def list_for_owner(self, owner: str) -> list[Task]:
        docs = self._store.query(TASKS_COLLECTION, [("user", "==", owner)], _NEWEST_FIRST)
        return self._to_tasks(docs)

    def subscribe_for_owner(self, owner: str, on_change: TaskListener) -> Subscription:
        """Live, newest-first list of the owner's tasks (public and private)."""
        return self._store.subscribe(
            TASKS_COLLECTION,
            [("user", "==", owner)],
            _NEWEST_FIRST,
            lambda docs: on_change(self._to_tasks(docs)),
        )

    def count(self) -> int:
        return self._store.count(TASKS_COLLECTION)
