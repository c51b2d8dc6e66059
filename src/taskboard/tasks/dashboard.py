# src/taskboard/tasks/dashboard.py

from __future__ import annotations

"""
Dashboard sync engine.

Keeps a live, newest-first view of one owner's tasks:
- subscribe(owner) opens the standing query (tearing down any previous one first),
- create/delete go straight to the store,
- the visible list is replaced only by subscription emissions, so it always
  mirrors store state and is never patched locally.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..core.errors import PermissionDenied, StoreError
from ..core.ports import Subscription
from .models import Task
from .task_store import TaskStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TaskDraft:
    """Input scratch state of the new-task form."""

    text: str = ""
    is_public: bool = False


class DashboardSyncEngine:
    def __init__(
            self,
            task_store: TaskStore,
            *,
            on_change: Callable[[list[Task]], None] | None = None,
            enforce_ownership: bool = True,
            clock: Callable[[], float] = time.time,
    ) -> None:
        self._task_store = task_store
        self.on_change = on_change
        self._enforce_ownership = enforce_ownership
        self._clock = clock

        self._subscription: Subscription | None = None
        self._owner_email: str | None = None
        self._tasks: list[Task] = []
        self.draft = TaskDraft()

    # ---- live view ----

    @property
    def owner_email(self) -> str | None:
        return self._owner_email

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def subscribe(self, owner_email: str) -> None:
        """
        Follow owner_email's tasks.

        Same owner with a live subscription: no-op. Different owner: the old
        subscription is cancelled and the view cleared before the new one opens.
        """
        if not owner_email:
            raise ValueError("owner_email is required")

        if owner_email == self._owner_email and self.subscribed:
            return

        self.unsubscribe()
        self._owner_email = owner_email

        subscription: Subscription | None = None

        def _emit(tasks: list[Task]) -> None:
            # The initial snapshot arrives before subscribe() returns.
            if subscription is not None and subscription is not self._subscription:
                return
            self._apply(tasks)

        try:
            subscription = self._task_store.subscribe_for_owner(owner_email, _emit)
        except StoreError:
            self._owner_email = None
            self._tasks = []
            raise
        self._subscription = subscription
        logger.info("Dashboard subscribed owner=%s tasks=%d", owner_email, len(self._tasks))

    def unsubscribe(self) -> None:
        sub = self._subscription
        if sub is None:
            return
        self._subscription = None
        sub.unsubscribe()
        logger.info("Dashboard unsubscribed owner=%s", self._owner_email)
        self._owner_email = None
        self._tasks = []

    def close(self) -> None:
        self.unsubscribe()

    def _apply(self, tasks: list[Task]) -> None:
        self._tasks = list(tasks)
        logger.debug("Dashboard snapshot owner=%s tasks=%d", self._owner_email, len(tasks))
        if self.on_change is not None:
            try:
                self.on_change(self.tasks)
            except Exception:
                logger.exception("Dashboard on_change callback failed.")

    # ---- intents ----

    def create_task(self, owner_email: str | None, text: str, is_public: bool = False) -> str | None:
        """
        Store a new task. Returns its id, or None when skipped or failed.

        On success the draft is reset; on failure it is left as is so the user
        can retry.
        """
        if not owner_email or not text or not text.strip():
            logger.debug("create_task skipped (owner=%s, empty text=%s)", owner_email, not text)
            return None

        try:
            task = self._task_store.create(
                owner=owner_email,
                text=text,
                is_public=is_public,
                created_at=self._clock(),
            )
        except StoreError:
            logger.exception("create_task failed owner=%s", owner_email)
            return None

        self.draft = TaskDraft()
        logger.info("Task created id=%s owner=%s public=%s", task.id, owner_email, is_public)
        return task.id

    def submit_draft(self, owner_email: str | None) -> str | None:
        return self.create_task(owner_email, self.draft.text, self.draft.is_public)

    def delete_task(self, task_id: str) -> bool:
        if not task_id:
            return False

        requester = None
        if self._enforce_ownership:
            if not self._owner_email:
                logger.debug("delete_task skipped: no dashboard owner (id=%s)", task_id)
                return False
            requester = self._owner_email

        try:
            self._task_store.delete(task_id, requester_email=requester)
        except PermissionDenied as e:
            logger.warning("delete_task refused: %s", e)
            return False
        except StoreError:
            logger.exception("delete_task failed id=%s", task_id)
            return False

        logger.info("Task delete issued id=%s", task_id)
        return True
