# src/taskboard/storage/document_store.py

from __future__ import annotations

import contextlib
import json
import logging
import re
import sqlite3
import threading
import uuid
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ..core.errors import StoreError
from ..core.ports import Document, Fields, Filter, OrderBy, SnapshotListener

logger = logging.getLogger(__name__)

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_DIRECTIONS = {"asc": "ASC", "desc": "DESC"}


def _new_id() -> str:
    return uuid.uuid4().hex[:20]


def _check_field(name: str) -> str:
    if not isinstance(name, str) or not _FIELD_RE.match(name):
        raise ValueError(f"invalid field name: {name!r}")
    return name


class LiveQuery:
    """
    A standing query registered on a SqliteDocumentStore.

    Re-runs its query after every committed write to its collection and calls
    on_change with the full result whenever that result differs from the last
    one delivered. unsubscribe() takes effect once; later calls do nothing.

    Refreshes of one query are serialised: results are delivered in the order
    they were read.
    """

    def __init__(
            self,
            store: SqliteDocumentStore,
            collection: str,
            filters: Sequence[Filter],
            order_by: Sequence[OrderBy],
            on_change: SnapshotListener,
    ) -> None:
        self._store = store
        self.collection = collection
        self._filters = tuple(filters)
        self._order_by = tuple(order_by)
        self._on_change = on_change
        self._last: list[Document] | None = None
        self._active = True
        self._refresh_lock = threading.RLock()

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            logger.debug("LiveQuery already cancelled collection=%s", self.collection)
            return
        self._active = False
        self._store._remove_listener(self)
        logger.debug("LiveQuery cancelled collection=%s filters=%s", self.collection, self._filters)

    def refresh(self) -> None:
        # One refresh at a time, from query to delivery.
        with self._refresh_lock:
            if not self._active:
                return

            snapshot = self._store.query(self.collection, self._filters, self._order_by)
            if snapshot == self._last:
                return
            self._last = snapshot

            try:
                self._on_change(list(snapshot))
            except Exception:
                logger.exception("Snapshot listener failed collection=%s", self.collection)


class SqliteDocumentStore:
    """
    SQLite document store with live queries.

    Every collection shares a single `documents` table; the document body is a
    JSON object and filters/ordering go through json_extract. Documents come
    back in insertion order unless an order is requested.

    Thread-safety:
    - each method opens its own SQLite connection
    - the listener registry is guarded by a re-entrant lock
    """

    def __init__(self, db_path: str | Path = "documents.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._listeners: dict[str, list[LiveQuery]] = {}
        self._ensure_schema()
        try:
            total = self._count_all()
        except StoreError:
            total = -1
        logger.info("DocumentStore ready db=%s total=%s", self._db_path, total)

    def close(self) -> None:
        """Cancel every live query still registered."""
        with self._lock:
            queries = [q for qs in self._listeners.values() for q in qs]
        for q in queries:
            q.unsubscribe()

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    collection TEXT NOT NULL,
                    id TEXT NOT NULL,
                    data TEXT NOT NULL DEFAULT '{}',
                    UNIQUE(collection, id)
                )
                """
            )
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_documents_collection ON documents(collection, seq)"
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"failed to prepare schema at {self._db_path}") from e
        finally:
            conn.close()

    @staticmethod
    def _fields_to_str(fields: Fields) -> str:
        return json.dumps(fields, ensure_ascii=False)

    @staticmethod
    def _str_to_fields(s: str | None) -> Fields:
        if not s:
            return {}
        try:
            val = json.loads(s)
            return val if isinstance(val, dict) else {}
        except ValueError:
            logger.warning("Corrupt document body ignored: %r", s[:80])
            return {}

    def _count_all(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM documents").fetchone()
            return int(n)
        except sqlite3.Error as e:
            raise StoreError("count failed") from e
        finally:
            conn.close()

    def _remove_listener(self, query: LiveQuery) -> None:
        with self._lock:
            queries = self._listeners.get(query.collection, [])
            if query in queries:
                queries.remove(query)
            if not queries:
                self._listeners.pop(query.collection, None)

    def _notify(self, collection: str) -> None:
        with self._lock:
            queries = list(self._listeners.get(collection, []))
        for q in queries:
            try:
                q.refresh()
            except StoreError:
                logger.exception("LiveQuery refresh failed collection=%s", collection)

    # ---- public API ----

    def create(self, collection: str, fields: Fields) -> str:
        if not collection:
            raise ValueError("collection is required")

        doc_id = _new_id()
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT INTO documents(collection, id, data) VALUES (?, ?, ?)",
                (collection, doc_id, self._fields_to_str(fields)),
            )
            conn.commit()
        except (sqlite3.Error, TypeError, ValueError) as e:
            raise StoreError(f"create failed collection={collection}") from e
        finally:
            conn.close()

        logger.debug("Document created collection=%s id=%s", collection, doc_id)
        self._notify(collection)
        return doc_id

    def delete_by_id(self, collection: str, doc_id: str) -> None:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                "DELETE FROM documents WHERE collection = ? AND id = ?",
                (collection, str(doc_id)),
            )
            conn.commit()
            deleted = cur.rowcount
        except sqlite3.Error as e:
            raise StoreError(f"delete failed collection={collection} id={doc_id}") from e
        finally:
            conn.close()

        logger.debug("Document deleted collection=%s id=%s rows=%s", collection, doc_id, deleted)
        if deleted:
            self._notify(collection)

    def get_by_id(self, collection: str, doc_id: str) -> Fields | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT data FROM documents WHERE collection = ? AND id = ?",
                (collection, str(doc_id)),
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"get failed collection={collection} id={doc_id}") from e
        finally:
            conn.close()

        return self._str_to_fields(row["data"]) if row else None

    def query(
            self,
            collection: str,
            filters: Sequence[Filter] = (),
            order_by: Sequence[OrderBy] = (),
    ) -> list[Document]:
        where = ["collection = ?"]
        params: list[Any] = [collection]

        for field, op, value in filters:
            if op != "==":
                raise ValueError(f"unsupported filter operator: {op!r}")
            where.append("json_extract(data, ?) = ?")
            params.extend((f"$.{_check_field(field)}", value))

        order: list[str] = []
        for field, direction in order_by:
            sql_dir = _DIRECTIONS.get(str(direction).lower())
            if sql_dir is None:
                raise ValueError(f"unsupported order direction: {direction!r}")
            order.append(f"json_extract(data, ?) {sql_dir}")
            params.append(f"$.{_check_field(field)}")
        # Ties fall back to insertion order, in the direction of the last key.
        tiebreak = "DESC" if order_by and str(order_by[-1][1]).lower() == "desc" else "ASC"
        order.append(f"seq {tiebreak}")

        sql = f"SELECT id, data FROM documents WHERE {' AND '.join(where)} ORDER BY {', '.join(order)}"

        conn = self._get_conn()
        try:
            rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"query failed collection={collection}") from e
        finally:
            conn.close()

        return [(str(r["id"]), self._str_to_fields(r["data"])) for r in rows]

    def subscribe(
            self,
            collection: str,
            filters: Sequence[Filter],
            order_by: Sequence[OrderBy],
            on_change: SnapshotListener,
    ) -> LiveQuery:
        """
        Register a live query and deliver its initial snapshot right away.

        Raises StoreError (and registers nothing) if the initial query fails.
        """
        live = LiveQuery(self, collection, filters, order_by, on_change)
        with self._lock:
            self._listeners.setdefault(collection, []).append(live)

        try:
            live.refresh()
        except Exception:
            live.unsubscribe()
            raise

        logger.debug("LiveQuery registered collection=%s filters=%s", collection, tuple(filters))
        return live

    def listener_count(self, collection: str) -> int:
        with self._lock:
            return len(self._listeners.get(collection, []))

    def count(self, collection: str) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute(
                "SELECT COUNT(*) FROM documents WHERE collection = ?", (collection,)
            ).fetchone()
            return int(n)
        except sqlite3.Error as e:
            raise StoreError(f"count failed collection={collection}") from e
        finally:
            conn.close()
