# tests/test_stores.py

from __future__ import annotations

import pytest

from taskboard.core.errors import PermissionDenied
from taskboard.storage.document_store import SqliteDocumentStore
from taskboard.tasks.comment_store import CommentStore
from taskboard.tasks.task_store import TaskStore


def test_task_persisted_shape(store: SqliteDocumentStore) -> None:
    tasks = TaskStore(store)
    task = tasks.create(owner="a@x", text="Buy milk", is_public=True, created_at=100.0)

    assert store.get_by_id("tasks", task.id) == {
        "task": "Buy milk",
        "created": 100.0,
        "user": "a@x",
        "public": True,
    }
    assert tasks.get(task.id) == task
    assert store.get_by_id("tasks", task.id) == task.to_document()


def test_task_create_requires_text_and_owner(store: SqliteDocumentStore) -> None:
    tasks = TaskStore(store)
    with pytest.raises(ValueError):
        tasks.create(owner="a@x", text="  ")
    with pytest.raises(ValueError):
        tasks.create(owner="", text="x")
    assert tasks.count() == 0


def test_task_delete_checks_owner_when_requester_given(store: SqliteDocumentStore) -> None:
    tasks = TaskStore(store)
    task = tasks.create(owner="a@x", text="mine")

    with pytest.raises(PermissionDenied):
        tasks.delete(task.id, requester_email="b@x")
    assert tasks.get(task.id) is not None

    tasks.delete(task.id, requester_email="a@x")
    assert tasks.get(task.id) is None


def test_task_delete_without_requester_is_unconditional(store: SqliteDocumentStore) -> None:
    tasks = TaskStore(store)
    task = tasks.create(owner="a@x", text="mine")
    tasks.delete(task.id)
    assert tasks.get(task.id) is None


def test_list_for_owner_newest_first(store: SqliteDocumentStore) -> None:
    tasks = TaskStore(store)
    tasks.create(owner="a@x", text="one", created_at=1.0)
    tasks.create(owner="b@x", text="theirs", created_at=2.0, is_public=True)
    tasks.create(owner="a@x", text="two", created_at=3.0)

    assert [t.text for t in tasks.list_for_owner("a@x")] == ["two", "one"]


def test_comment_persisted_shape_and_order(store: SqliteDocumentStore) -> None:
    tasks = TaskStore(store)
    comments = CommentStore(store)
    task = tasks.create(owner="a@x", text="public", is_public=True)

    first = comments.create(
        task_id=task.id, author_email="b@x", author_name="Bea", text="hi", created_at=5.0
    )
    comments.create(task_id=task.id, author_email="c@x", author_name="Cid", text="yo")

    assert store.get_by_id("comments", first.id) == {
        "comment": "hi",
        "created": 5.0,
        "user": "b@x",
        "name": "Bea",
        "taskID": task.id,
    }
    assert [c.text for c in comments.list_for_task(task.id)] == ["hi", "yo"]
    assert comments.count() == 2


def test_comment_on_private_task_is_refused(store: SqliteDocumentStore) -> None:
    tasks = TaskStore(store)
    comments = CommentStore(store)
    private = tasks.create(owner="a@x", text="secret", is_public=False)

    with pytest.raises(PermissionDenied):
        comments.create(task_id=private.id, author_email="b@x", author_name="Bea", text="hi")
    with pytest.raises(PermissionDenied):
        comments.create(task_id="missing", author_email="b@x", author_name="Bea", text="hi")
    assert comments.count() == 0


def test_comment_parent_check_can_be_disabled(store: SqliteDocumentStore) -> None:
    comments = CommentStore(store, require_public_parent=False)
    c = comments.create(task_id="whatever", author_email="b@x", author_name="Bea", text="hi")
    assert comments.get(c.id) is not None


def test_comment_delete_checks_author(store: SqliteDocumentStore) -> None:
    tasks = TaskStore(store)
    comments = CommentStore(store)
    task = tasks.create(owner="a@x", text="public", is_public=True)
    c = comments.create(task_id=task.id, author_email="b@x", author_name="Bea", text="hi")

    with pytest.raises(PermissionDenied):
        comments.delete(c.id, requester_email="a@x")

    comments.delete(c.id, requester_email="b@x")
    assert comments.get(c.id) is None
