# src/taskboard/pages.py

from __future__ import annotations

"""
Page resolution boundary.

Each route resolves to either props for rendering or a Redirect. The detail
page additionally keeps a small state machine:

    RESOLVING -> DENIED      (terminal)
    RESOLVING -> RESOLVED
    RESOLVED  -> RESOLVED    (local comment post/delete; never re-resolves)
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from .core.identity import Identity
from .tasks.comment_store import CommentStore
from .tasks.comments import CommentThreadEngine
from .tasks.detail import TaskDetailResolver
from .tasks.models import Comment, Denied, Task, TaskDetail
from .tasks.share import ShareLinkGenerator
from .tasks.task_store import TaskStore

logger = logging.getLogger(__name__)

HOME_ROUTE = "/"


@dataclass(frozen=True, slots=True)
class Redirect:
    destination: str = HOME_ROUTE
    permanent: bool = False


@dataclass(frozen=True, slots=True)
class DashboardProps:
    email: str


def resolve_dashboard_route(identity: Identity | None) -> DashboardProps | Redirect:
    if identity is None or not identity.email:
        return Redirect()
    return DashboardProps(email=identity.email)


@dataclass(frozen=True, slots=True)
class DashboardItem:
    task: Task
    detail_path: str | None
    share_url: str | None
    deletable: bool = True

    @property
    def show_public_tag(self) -> bool:
        return self.task.is_public


def build_dashboard_items(tasks: list[Task], share: ShareLinkGenerator) -> list[DashboardItem]:
    """Only public tasks get a detail link and a share control."""
    return [
        DashboardItem(
            task=t,
            detail_path=f"/task/{t.id}" if t.is_public else None,
            share_url=share.link(t.id) if t.is_public else None,
        )
        for t in tasks
    ]


@dataclass(frozen=True, slots=True)
class HeaderView:
    greeting: str | None
    show_dashboard_link: bool
    action: str


def build_header(identity: Identity | None) -> HeaderView:
    if identity is None:
        return HeaderView(greeting=None, show_dashboard_link=False, action="sign_in")
    return HeaderView(greeting=f"Hello {identity.name}", show_dashboard_link=True, action="sign_out")


async def resolve_task_route(resolver: TaskDetailResolver, task_id: str) -> TaskDetail | Redirect:
    result = await resolver.resolve(task_id)
    if isinstance(result, Denied):
        return Redirect()
    return result


# ---- home ----


@dataclass(frozen=True, slots=True)
class HomeStats:
    posts: int
    comments: int


class HomeStatsCache:
    """Task/comment totals, recomputed at most once per revalidate window."""

    def __init__(
        self,
        task_store: TaskStore,
        comment_store: CommentStore,
        *,
        revalidate_seconds: float = 120.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._task_store = task_store
        self._comment_store = comment_store
        self._revalidate_seconds = max(0.0, float(revalidate_seconds))
        self._clock = clock
        self._cached: HomeStats | None = None
        self._computed_at = 0.0

    def get(self) -> HomeStats:
        now = self._clock()
        if self._cached is not None and now - self._computed_at < self._revalidate_seconds:
            return self._cached

        stats = HomeStats(
            posts=self._task_store.count() or 0,
            comments=self._comment_store.count() or 0,
        )
        self._cached = stats
        self._computed_at = now
        logger.debug("Home stats revalidated posts=%d comments=%d", stats.posts, stats.comments)
        return stats


# ---- task detail ----


class PageState(StrEnum):
    RESOLVING = "resolving"
    DENIED = "denied"
    RESOLVED = "resolved"


class DetailPage:
    def __init__(
        self,
        resolver: TaskDetailResolver,
        comment_store: CommentStore,
        task_id: str,
        *,
        enforce_ownership: bool = True,
    ) -> None:
        self._resolver = resolver
        self._comment_store = comment_store
        self._enforce_ownership = enforce_ownership
        self.task_id = task_id
        self.state = PageState.RESOLVING
        self.detail: TaskDetail | None = None
        self.redirect: Redirect | None = None
        self.thread: CommentThreadEngine | None = None

    async def load(self) -> PageState:
        if self.state is not PageState.RESOLVING:
            return self.state

        result = await resolve_task_route(self._resolver, self.task_id)
        if isinstance(result, Redirect):
            self.state = PageState.DENIED
            self.redirect = result
            return self.state

        self.detail = result
        self.thread = CommentThreadEngine(
            self._comment_store,
            result.task_id,
            result.comments,
            enforce_ownership=self._enforce_ownership,
        )
        self.state = PageState.RESOLVED
        return self.state

    def _require_thread(self) -> CommentThreadEngine:
        if self.state is not PageState.RESOLVED or self.thread is None:
            raise RuntimeError(f"task page {self.task_id} is {self.state}, not resolved")
        return self.thread

    @property
    def comments(self) -> list[Comment]:
        return self._require_thread().comments

    @property
    def show_empty_state(self) -> bool:
        return self._require_thread().is_empty

    def can_comment(self, identity: Identity | None) -> bool:
        return self.state is PageState.RESOLVED and identity is not None and identity.is_complete

    def post(self, identity: Identity | None, text: str) -> Comment | None:
        thread = self._require_thread()
        if identity is None:
            return None
        return thread.post(thread.task_id, identity.email, identity.name, text)

    def remove(self, identity: Identity | None, comment_id: str) -> bool:
        thread = self._require_thread()
        if comment_id not in thread.deletable_ids(identity):
            logger.debug("remove hidden for comment=%s", comment_id)
            return False
        return thread.remove(comment_id, identity.email if identity else None)
