# src/taskboard/tasks/comment_store.py

from __future__ import annotations

import logging
import time

from ..core.errors import PermissionDenied
from ..core.ports import DocumentStore
from .models import COMMENTS_COLLECTION, TASKS_COLLECTION, Comment

logger = logging.getLogger(__name__)


class CommentStore:
    """
    Typed access to the `comments` collection.

    With require_public_parent=True, create() refuses comments on tasks that
    are missing or private.
    """

    def __init__(self, store: DocumentStore, *, require_public_parent: bool = True) -> None:
        self._store = store
        self._require_public_parent = require_public_parent

    def create(
        self,
        *,
        task_id: str,
        author_email: str,
        author_name: str,
        text: str,
        created_at: float | None = None,
    ) -> Comment:
        if not task_id:
            raise ValueError("task_id is required")
        if not author_email or not author_name:
            raise ValueError("author identity is required")
        if not text or not text.strip():
            raise ValueError("text is required")

        if self._require_public_parent:
            parent = self._store.get_by_id(TASKS_COLLECTION, task_id)
            if parent is None or not parent.get("public"):
                raise PermissionDenied(f"task {task_id} is not open for comments")

        comment = Comment(
            id="",
            text=text,
            author_email=author_email,
            author_name=author_name,
            task_id=task_id,
            created_at=time.time() if created_at is None else float(created_at),
        )
        comment_id = self._store.create(COMMENTS_COLLECTION, comment.to_document())
        logger.debug("Comment added id=%s task=%s author=%s", comment_id, task_id, author_email)
        return Comment.from_document(comment_id, comment.to_document())

    def get(self, comment_id: str) -> Comment | None:
        fields = self._store.get_by_id(COMMENTS_COLLECTION, comment_id)
        return Comment.from_document(comment_id, fields) if fields is not None else None

    def delete(self, comment_id: str, *, requester_email: str | None = None) -> None:
        if requester_email is not None:
            comment = self.get(comment_id)
            if comment is None:
                return
            if comment.author_email != requester_email:
                raise PermissionDenied(
                    f"{requester_email} is not the author of comment {comment_id}"
                )

        self._store.delete_by_id(COMMENTS_COLLECTION, comment_id)
        logger.debug("Comment deleted id=%s", comment_id)

    def list_for_task(self, task_id: str) -> list[Comment]:
        """All comments of a task, in store insertion order."""
        docs = self._store.query(COMMENTS_COLLECTION, [("taskID", "==", task_id)])
        return [Comment.from_document(doc_id, fields) for doc_id, fields in docs]

    def count(self) -> int:
        return self._store.count(COMMENTS_COLLECTION)
