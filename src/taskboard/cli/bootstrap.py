# src/taskboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the document store, adapters, engines, identity provider and clipboard
  into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..connectors.console_connector import ConsoleClipboard
from ..core.identity import LocalIdentityProvider
from ..core.ports import Clipboard, IdentityProvider
from ..core.state import AppState
from ..pages import HomeStatsCache
from ..storage.document_store import SqliteDocumentStore
from ..tasks.comment_store import CommentStore
from ..tasks.dashboard import DashboardSyncEngine
from ..tasks.detail import TaskDetailResolver
from ..tasks.share import ShareLinkGenerator
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    clipboard: Clipboard | None = None,
    identity: IdentityProvider | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    enforce = bool(getattr(settings, "enforce_ownership", True))

    store = SqliteDocumentStore(settings.db_path)
    task_store = TaskStore(store)
    comment_store = CommentStore(store, require_public_parent=enforce)

    state = AppState(
        settings=settings,
        store=store,
        task_store=task_store,
        comment_store=comment_store,
        identity=identity or LocalIdentityProvider(),
        dashboard=DashboardSyncEngine(task_store, enforce_ownership=enforce),
        resolver=TaskDetailResolver(
            task_store,
            comment_store,
            date_format=getattr(settings, "date_format", "%d/%m/%Y"),
        ),
        share=ShareLinkGenerator(settings.base_url),
        clipboard=clipboard or ConsoleClipboard(),
        home_stats=HomeStatsCache(
            task_store,
            comment_store,
            revalidate_seconds=getattr(settings, "stats_revalidate_seconds", 120),
        ),
    )
    logger.debug("AppState created db=%s enforce_ownership=%s", settings.db_path, enforce)
    return state


def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.dashboard.close()
    except Exception:
        logger.exception("Dashboard close failed.")

    try:
        state.store.close()
    except Exception:
        logger.debug("Store close failed.", exc_info=True)
