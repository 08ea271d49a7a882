"""SQLite-backed order document store with snapshot subscriptions."""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

from cocina.config import DB_PATH
from cocina.settlement import prepare_settlement_update

logger = logging.getLogger(__name__)

Document = dict[str, Any]
SnapshotListener = Callable[[list[Document]], None]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DocumentStore:
    """
    Collections of JSON documents keyed by id.

    Subscribers receive the full collection immediately and again after every
    write to it. Documents come back with their id under ``id`` and their
    collection under ``__collection``.
    """

    def __init__(self, db_path: str = DB_PATH) -> None:
        self.db_path = db_path
        self._listeners: dict[str, list[SnapshotListener]] = {}
        # Each ":memory:" connection is its own database, so the store holds one open.
        self._memory_conn = sqlite3.connect(":memory:") if db_path == ":memory:" else None
        self.bootstrap_schema()

    def _connect(self) -> sqlite3.Connection:
        if self._memory_conn is not None:
            return self._memory_conn
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path)

    def bootstrap_schema(self) -> None:
        """Create persistence schema if it does not already exist."""
        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    collection TEXT NOT NULL,
                    id TEXT NOT NULL,
                    data TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (collection, id)
                );

                CREATE INDEX IF NOT EXISTS idx_documents_collection_created
                    ON documents(collection, created_at);
                """
            )

    @staticmethod
    def _check_collection(collection: str) -> None:
        if not collection:
            raise ValueError("collection name must not be empty")

    @staticmethod
    def _decode(collection: str, doc_id: str, data: str) -> Document:
        document = json.loads(data)
        document["id"] = doc_id
        document["__collection"] = collection
        return document

    def add(self, collection: str, data: Mapping[str, Any]) -> str:
        """Insert a new document and return its id."""
        self._check_collection(collection)
        doc_id = uuid4().hex
        now = _utc_now_iso()
        payload = {key: value for key, value in data.items() if key not in ("id", "__collection")}
        payload.setdefault("createdAt", now)
        payload.setdefault("updatedAt", now)
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO documents (collection, id, data, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                (collection, doc_id, json.dumps(payload, ensure_ascii=False), now, now),
            )
        self._notify(collection)
        return doc_id

    def get(self, collection: str, doc_id: str) -> Document | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            ).fetchone()
        if row is None:
            return None
        return self._decode(collection, doc_id, row[0])

    def list(self, collection: str) -> list[Document]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT id, data FROM documents WHERE collection = ? ORDER BY created_at, rowid",
                (collection,),
            ).fetchall()
        return [self._decode(collection, doc_id, data) for doc_id, data in rows]

    def update(self, collection: str, doc_id: str, patch: Mapping[str, Any]) -> Document:
        """Shallow-merge ``patch`` into a document and stamp ``updatedAt``."""
        self._check_collection(collection)
        now = _utc_now_iso()
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            ).fetchone()
            if row is None:
                raise KeyError(f"{collection}/{doc_id} does not exist")
            payload = json.loads(row[0])
            payload.update({key: value for key, value in patch.items() if key not in ("id", "__collection")})
            payload["updatedAt"] = now
            data = json.dumps(payload, ensure_ascii=False)
            conn.execute(
                "UPDATE documents SET data = ?, updated_at = ? WHERE collection = ? AND id = ?",
                (data, now, collection, doc_id),
            )
        self._notify(collection)
        return self._decode(collection, doc_id, data)

    def delete_all(self, collection: str) -> int:
        """Irreversibly delete every document in a collection; returns the count removed."""
        self._check_collection(collection)
        with self._connect() as conn:
            cur = conn.execute("DELETE FROM documents WHERE collection = ?", (collection,))
            removed = cur.rowcount
        logger.warning("Bulk-deleted %d documents from %s", removed, collection)
        self._notify(collection)
        return removed

    def subscribe(self, collection: str, on_snapshot: SnapshotListener) -> Callable[[], None]:
        """Register a snapshot listener; returns a function that unsubscribes it."""
        self._check_collection(collection)
        self._listeners.setdefault(collection, []).append(on_snapshot)
        on_snapshot(self.list(collection))

        def unsubscribe() -> None:
            listeners = self._listeners.get(collection, [])
            if on_snapshot in listeners:
                listeners.remove(on_snapshot)

        return unsubscribe

    def _notify(self, collection: str) -> None:
        listeners = list(self._listeners.get(collection, []))
        if not listeners:
            return
        snapshot = self.list(collection)
        for listener in listeners:
            listener([dict(document) for document in snapshot])


def apply_settlement(
    store: DocumentStore,
    collection: str,
    order: Mapping[str, Any],
    methods: Iterable[str],
) -> Document:
    """Mark ``methods`` of a stored delivery order as turned in by the courier."""
    doc_id = order.get("id")
    if not doc_id:
        raise ValueError("order has no id")
    return store.update(collection, str(doc_id), prepare_settlement_update(order, methods))
