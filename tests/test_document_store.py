# tests/test_document_store.py

from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from taskboard.storage.document_store import SqliteDocumentStore


def test_create_get_delete(tmp_path: Path) -> None:
    store = SqliteDocumentStore(tmp_path / "docs.sqlite3")

    doc_id = store.create("tasks", {"task": "Buy milk", "user": "a@x", "public": True})
    assert doc_id

    assert store.get_by_id("tasks", doc_id) == {"task": "Buy milk", "user": "a@x", "public": True}
    assert store.get_by_id("comments", doc_id) is None
    assert store.count("tasks") == 1

    store.delete_by_id("tasks", doc_id)
    assert store.get_by_id("tasks", doc_id) is None
    assert store.count("tasks") == 0

    # Deleting something that is not there is fine.
    store.delete_by_id("tasks", doc_id)


def test_query_filters_and_orders(tmp_path: Path) -> None:
    store = SqliteDocumentStore(tmp_path / "docs.sqlite3")
    store.create("tasks", {"task": "old", "user": "a@x", "created": 1.0})
    store.create("tasks", {"task": "other", "user": "b@x", "created": 2.0})
    store.create("tasks", {"task": "new", "user": "a@x", "created": 3.0})

    inserted = [f["task"] for _, f in store.query("tasks", [("user", "==", "a@x")])]
    assert inserted == ["old", "new"]

    newest = store.query("tasks", [("user", "==", "a@x")], [("created", "desc")])
    assert [f["task"] for _, f in newest] == ["new", "old"]


def test_equal_order_keys_follow_the_requested_direction(tmp_path: Path) -> None:
    store = SqliteDocumentStore(tmp_path / "docs.sqlite3")
    store.create("tasks", {"task": "first", "user": "a@x", "created": 5.0})
    store.create("tasks", {"task": "second", "user": "a@x", "created": 5.0})

    newest = store.query("tasks", [("user", "==", "a@x")], [("created", "desc")])
    assert [f["task"] for _, f in newest] == ["second", "first"]

    oldest = store.query("tasks", [("user", "==", "a@x")], [("created", "asc")])
    assert [f["task"] for _, f in oldest] == ["first", "second"]


def test_query_matches_booleans(tmp_path: Path) -> None:
    store = SqliteDocumentStore(tmp_path / "docs.sqlite3")
    store.create("tasks", {"task": "pub", "public": True})
    store.create("tasks", {"task": "priv", "public": False})

    docs = store.query("tasks", [("public", "==", True)])
    assert [f["task"] for _, f in docs] == ["pub"]


def test_query_rejects_unsupported_operator_and_field(tmp_path: Path) -> None:
    store = SqliteDocumentStore(tmp_path / "docs.sqlite3")
    with pytest.raises(ValueError):
        store.query("tasks", [("created", ">", 1)])
    with pytest.raises(ValueError):
        store.query("tasks", [("user') OR 1=1 --", "==", "x")])
    with pytest.raises(ValueError):
        store.query("tasks", order_by=[("created", "sideways")])


def test_live_query_initial_snapshot_and_updates(tmp_path: Path) -> None:
    store = SqliteDocumentStore(tmp_path / "docs.sqlite3")
    store.create("tasks", {"task": "first", "user": "a@x", "created": 1.0})

    snapshots: list[list[str]] = []
    sub = store.subscribe(
        "tasks",
        [("user", "==", "a@x")],
        [("created", "desc")],
        lambda docs: snapshots.append([f["task"] for _, f in docs]),
    )

    assert sub.active
    assert snapshots == [["first"]]

    store.create("tasks", {"task": "second", "user": "a@x", "created": 2.0})
    assert snapshots[-1] == ["second", "first"]

    # A change outside the result set does not re-deliver.
    store.create("tasks", {"task": "foreign", "user": "b@x", "created": 3.0})
    assert len(snapshots) == 2

    sub.unsubscribe()
    store.create("tasks", {"task": "third", "user": "a@x", "created": 4.0})
    assert len(snapshots) == 2


def test_unsubscribe_is_idempotent(tmp_path: Path) -> None:
    store = SqliteDocumentStore(tmp_path / "docs.sqlite3")
    sub = store.subscribe("tasks", [], [], lambda docs: None)
    assert store.listener_count("tasks") == 1

    sub.unsubscribe()
    sub.unsubscribe()

    assert not sub.active
    assert store.listener_count("tasks") == 0


def test_listener_failure_does_not_reach_writer(tmp_path: Path) -> None:
    store = SqliteDocumentStore(tmp_path / "docs.sqlite3")
    calls = {"n": 0}

    def boom(docs) -> None:
        calls["n"] += 1
        if calls["n"] > 1:
            raise RuntimeError("listener bug")

    store.subscribe("tasks", [], [], boom)
    doc_id = store.create("tasks", {"task": "x"})

    assert calls["n"] == 2
    assert store.get_by_id("tasks", doc_id) is not None


def test_close_cancels_all_live_queries(tmp_path: Path) -> None:
    store = SqliteDocumentStore(tmp_path / "docs.sqlite3")
    a = store.subscribe("tasks", [], [], lambda docs: None)
    b = store.subscribe("comments", [], [], lambda docs: None)

    store.close()

    assert not a.active and not b.active
    assert store.listener_count("tasks") == 0
    assert store.listener_count("comments") == 0


def test_concurrent_writers_deliver_latest_snapshot_last(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    store = SqliteDocumentStore(tmp_path / "docs.sqlite3")
    views: list[list[str]] = []
    live = store.subscribe(
        "tasks",
        [("user", "==", "a@x")],
        [("created", "desc")],
        lambda docs: views.append([f["task"] for _, f in docs]),
    )

    real_query = store.query
    slow_read_done = threading.Event()

    def query(*args, **kwargs):
        docs = real_query(*args, **kwargs)
        if threading.current_thread().name == "writer-1":
            # The first writer's refresh has read its result; stall before delivery.
            slow_read_done.set()
            time.sleep(0.3)
        return docs

    monkeypatch.setattr(store, "query", query)

    writer = threading.Thread(
        target=store.create,
        args=("tasks", {"task": "one", "user": "a@x", "created": 1.0}),
        name="writer-1",
    )
    writer.start()
    assert slow_read_done.wait(5)
    store.create("tasks", {"task": "two", "user": "a@x", "created": 2.0})
    writer.join(5)

    expected = [f["task"] for _, f in real_query("tasks", [("user", "==", "a@x")], [("created", "desc")])]
    assert expected == ["two", "one"]
    assert views[-1] == expected
    live.unsubscribe()
