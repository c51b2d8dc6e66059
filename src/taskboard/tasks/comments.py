# src/taskboard/tasks/comments.py

from __future__ import annotations

"""
Comment thread engine.

The visible thread is derived from three pieces:
- seed:      the authoritative list from the last one-shot resolution,
- appended:  comments this session created (already carrying store ids),
- removed:   ids this session deleted.

merge_thread() combines them; there is no live subscription on comments, so
other viewers see new entries only after they resolve the task again.
"""

import logging
import time
from collections.abc import Callable, Iterable, Sequence

from ..core.errors import PermissionDenied, StoreError
from ..core.identity import Identity
from .comment_store import CommentStore
from .models import Comment

logger = logging.getLogger(__name__)


def merge_thread(
        seed: Sequence[Comment],
        appended: Sequence[Comment],
        removed: Iterable[str] = (),
) -> list[Comment]:
    """Seed order first, then local appends; ids are unique and removed ids dropped."""
    gone = set(removed)
    seen: set[str] = set()
    out: list[Comment] = []
    for c in (*seed, *appended):
        if c.id in gone or c.id in seen:
            continue
        seen.add(c.id)
        out.append(c)
    return out


def can_delete(comment: Comment, identity: Identity | None) -> bool:
    return identity is not None and bool(identity.email) and comment.author_email == identity.email


class CommentThreadEngine:
    def __init__(
            self,
            comment_store: CommentStore,
            task_id: str,
            seed: Sequence[Comment] = (),
            *,
            enforce_ownership: bool = True,
            clock: Callable[[], float] = time.time,
    ) -> None:
        self._comment_store = comment_store
        self.task_id = task_id
        self._enforce_ownership = enforce_ownership
        self._clock = clock

        self._seed: list[Comment] = list(seed)
        self._appended: list[Comment] = []
        self._removed: set[str] = set()
        self.draft = ""

    @property
    def comments(self) -> list[Comment]:
        return merge_thread(self._seed, self._appended, self._removed)

    @property
    def is_empty(self) -> bool:
        return not self.comments

    def deletable_ids(self, identity: Identity | None) -> set[str]:
        return {c.id for c in self.comments if can_delete(c, identity)}

    def reseed(self, comments: Sequence[Comment]) -> None:
        """Adopt a fresh authoritative list; local appends it already holds are not duplicated."""
        self._seed = list(comments)
        known = {c.id for c in self._seed}
        self._appended = [c for c in self._appended if c.id not in known]

    def post(
            self,
            task_id: str,
            author_email: str | None,
            author_name: str | None,
            text: str,
    ) -> Comment | None:
        if task_id != self.task_id:
            logger.debug("post skipped: task=%s is not this thread (%s)", task_id, self.task_id)
            return None
        if not text or not text.strip():
            logger.debug("post skipped: empty text (task=%s)", task_id)
            return None
        if not author_email or not author_name:
            logger.debug("post skipped: no identity (task=%s)", task_id)
            return None

        try:
            comment = self._comment_store.create(
                task_id=task_id,
                author_email=author_email,
                author_name=author_name,
                text=text,
                created_at=self._clock(),
            )
        except PermissionDenied as e:
            logger.warning("post refused: %s", e)
            return None
        except StoreError:
            logger.exception("post failed task=%s author=%s", task_id, author_email)
            return None

        self._appended.append(comment)
        self.draft = ""
        logger.info("Comment posted id=%s task=%s", comment.id, task_id)
        return comment

    def remove(self, comment_id: str, requester_email: str | None = None) -> bool:
        """
        Delete a comment, then drop it from the local thread.

        The local removal happens even when the store delete fails (no rollback).
        An ownership refusal leaves the thread untouched.
        """
        if not comment_id:
            return False

        requester = requester_email if self._enforce_ownership else None
        if self._enforce_ownership and not requester:
            logger.debug("remove skipped: no identity (comment=%s)", comment_id)
            return False

        ok = True
        try:
            self._comment_store.delete(comment_id, requester_email=requester)
        except PermissionDenied as e:
            logger.warning("remove refused: %s", e)
            return False
        except StoreError:
            logger.exception("remove failed comment=%s", comment_id)
            ok = False

        self._removed.add(comment_id)
        return ok
