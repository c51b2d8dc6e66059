# src/taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the document store, identity provider and clipboard swappable
and makes testing easier.
"""

from collections.abc import Callable, Sequence
from typing import Any, Awaitable, Protocol

from .identity import Identity

Fields = dict[str, Any]
# Raw stored document body, e.g. {"task": "...", "user": "...", ...}.

Document = tuple[str, Fields]
# (document id, fields) as returned by queries.

Filter = tuple[str, str, Any]
# (field, operator, value). Only "==" is supported.

OrderBy = tuple[str, str]
# (field, "asc" | "desc").

SnapshotListener = Callable[[list[Document]], None]


class Subscription(Protocol):
    """Handle for a standing live query."""

    @property
    def active(self) -> bool: ...

    def unsubscribe(self) -> None: ...


class DocumentStore(Protocol):
    def create(self, collection: str, fields: Fields) -> str: ...
    def delete_by_id(self, collection: str, doc_id: str) -> None: ...
    def get_by_id(self, collection: str, doc_id: str) -> Fields | None: ...

    def query(
            self,
            collection: str,
            filters: Sequence[Filter] = (),
            order_by: Sequence[OrderBy] = (),
    ) -> list[Document]: ...

    def subscribe(
            self,
            collection: str,
            filters: Sequence[Filter],
            order_by: Sequence[OrderBy],
            on_change: SnapshotListener,
    ) -> Subscription: ...

    def count(self, collection: str) -> int: ...


class IdentityProvider(Protocol):
    def current_identity(self) -> Identity | None: ...
    def sign_in(
        self, provider: str = "local", *, email: str = "", name: str = ""
    ) -> Identity | None: ...
    def sign_out(self) -> None: ...


class Clipboard(Protocol):
    """System clipboard, owned by the front-end."""

    def write_text(self, text: str) -> Awaitable[None]: ...
