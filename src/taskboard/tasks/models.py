# src/taskboard/tasks/models.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..core.ports import Fields

TASKS_COLLECTION = "tasks"
COMMENTS_COLLECTION = "comments"


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    text: str
    owner: str
    created_at: float
    is_public: bool

    @classmethod
    def from_document(cls, doc_id: str, fields: Fields) -> Task:
        return cls(
            id=str(doc_id),
            text=str(fields.get("task") or ""),
            owner=str(fields.get("user") or ""),
            created_at=_as_float(fields.get("created")),
            is_public=bool(fields.get("public", False)),
        )

    def to_document(self) -> Fields:
        return {
            "task": self.text,
            "created": self.created_at,
            "user": self.owner,
            "public": self.is_public,
        }


@dataclass(frozen=True, slots=True)
class Comment:
    id: str
    text: str
    author_email: str
    author_name: str
    task_id: str
    created_at: float | None = None

    @classmethod
    def from_document(cls, doc_id: str, fields: Fields) -> Comment:
        created = fields.get("created")
        return cls(
            id=str(doc_id),
            text=str(fields.get("comment") or ""),
            author_email=str(fields.get("user") or ""),
            author_name=str(fields.get("name") or ""),
            task_id=str(fields.get("taskID") or ""),
            created_at=_as_float(created) if created is not None else None,
        )

    def to_document(self) -> Fields:
        return {
            "comment": self.text,
            "created": self.created_at,
            "user": self.author_email,
            "name": self.author_name,
            "taskID": self.task_id,
        }


@dataclass(frozen=True, slots=True)
class TaskDetail:
    """One-shot snapshot of a public task and its comment thread."""

    task_id: str
    text: str
    owner: str
    is_public: bool
    created: str
    comments: tuple[Comment, ...] = ()


@dataclass(frozen=True, slots=True)
class Denied:
    """The task is missing or private; the caller must redirect away."""

    task_id: str
    reason: str = "not_public"


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
