# src/taskboard/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..pages import DetailPage, HomeStatsCache
    from ..storage.document_store import SqliteDocumentStore
    from ..tasks.comment_store import CommentStore
    from ..tasks.dashboard import DashboardSyncEngine
    from ..tasks.detail import TaskDetailResolver
    from ..tasks.share import ShareLinkGenerator
    from ..tasks.task_store import TaskStore
    from .ports import Clipboard, IdentityProvider


@dataclass
class AppState:
    # Settings object (real Settings or a SimpleNamespace in tests).
    settings: Any

    store: SqliteDocumentStore
    task_store: TaskStore
    comment_store: CommentStore

    identity: IdentityProvider
    dashboard: DashboardSyncEngine
    resolver: TaskDetailResolver
    share: ShareLinkGenerator
    clipboard: Clipboard
    home_stats: HomeStatsCache

    # Detail page currently open in the console, if any.
    page: DetailPage | None = None
