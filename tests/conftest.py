# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard.cli.bootstrap import create_initial_state
from taskboard.core.state import AppState
from taskboard.storage.document_store import SqliteDocumentStore
from taskboard.tasks.comment_store import CommentStore
from taskboard.tasks.task_store import TaskStore

from .fakes import FakeClipboard, FlakyDocumentStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskboard-test",
        log_level="DEBUG",
        base_url="https://tasks.example.com",
        data_dir=tmp_path,
        db_path=tmp_path / "documents.sqlite3",
        date_format="%d/%m/%Y",
        stats_revalidate_seconds=120,
        enforce_ownership=True,
        console_enabled=False,
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> SqliteDocumentStore:
    """Real SQLite store: its live-query behaviour is part of what we test."""
    return SqliteDocumentStore(settings.db_path)


@pytest.fixture()
def flaky(store: SqliteDocumentStore) -> FlakyDocumentStore:
    return FlakyDocumentStore(store)


@pytest.fixture()
def task_store(flaky: FlakyDocumentStore) -> TaskStore:
    return TaskStore(flaky)


@pytest.fixture()
def comment_store(flaky: FlakyDocumentStore) -> CommentStore:
    return CommentStore(flaky)


@pytest.fixture()
def clipboard() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture()
def state(settings: SimpleNamespace, clipboard: FakeClipboard) -> Iterator[AppState]:
    state = create_initial_state(settings=settings, clipboard=clipboard)
    yield state
    state.dashboard.close()
    state.store.close()
