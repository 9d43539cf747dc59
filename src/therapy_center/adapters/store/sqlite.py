# src/therapy_center/adapters/store/sqlite.py
"""
SQLite Document Store Adapter

Implements DocumentStorePort on a single SQLite table holding JSON documents:

    documents(collection TEXT, id TEXT, data TEXT, PRIMARY KEY (collection, id))

Equality filters and ordering use json_extract on the data column.
For local development or single-machine deployments.
"""

import json
import logging
import re
import sqlite3
import threading
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from ...core.ports.store import DEFAULT_BATCH_LIMIT, DocumentRef, DocumentStorePort
from ...errors import NotFoundError, StoreUnavailableError

logger = logging.getLogger(__name__)

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _encode(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps(data: Dict[str, Any]) -> str:
    return json.dumps(data, default=_encode, ensure_ascii=False)


def _json_path(field: str) -> str:
    if not _FIELD_NAME.match(field):
        raise ValueError(f"Invalid field name: {field!r}")
    return f"$.{field}"


class SQLiteDocumentStore(DocumentStorePort):
    """
    SQLite implementation of DocumentStorePort.

    Dates are stored as ISO-8601 strings; services normalize them on read.
    """

    def __init__(self, db_path: str = "therapy_center.db", batch_limit: int = DEFAULT_BATCH_LIMIT):
        """
        Initialize SQLite adapter.

        Args:
            db_path: Path to the SQLite database file (":memory:" for a private in-process DB)
            batch_limit: Maximum refs per batch delete
        """
        self._db_path = db_path
        self.batch_limit = batch_limit
        self._lock = threading.RLock()
        # An in-memory database only lives as long as its connection
        self._shared: Optional[sqlite3.Connection] = None
        if db_path == ":memory:":
            self._shared = sqlite3.connect(db_path, check_same_thread=False)
        self._init_schema()
        logger.info(f"SQLiteDocumentStore initialized with {db_path}")

    @contextmanager
    def _get_connection(self):
        """Get a database connection; commits on success, rolls back on error."""
        with self._lock:
            conn = None
            try:
                conn = self._shared or sqlite3.connect(self._db_path)
                with conn:
                    yield conn
            except sqlite3.Error as e:
                logger.error(f"SQLite error on {self._db_path}: {e}")
                raise StoreUnavailableError("Document store unavailable", detail=str(e)) from e
            finally:
                if conn is not None and conn is not self._shared:
                    conn.close()

    def _init_schema(self) -> None:
        with self._get_connection() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    collection TEXT NOT NULL,
                    id TEXT NOT NULL,
                    data TEXT NOT NULL,
                    PRIMARY KEY (collection, id)
                )
                """
            )

    @staticmethod
    def _row_to_doc(id: str, data: str) -> Dict[str, Any]:
        doc = json.loads(data)
        doc["id"] = id
        return doc

    # =============================================================================
    # SINGLE DOCUMENT OPERATIONS
    # =============================================================================

    def get(self, collection: str, id: str) -> Optional[Dict[str, Any]]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT id, data FROM documents WHERE collection = ? AND id = ?",
                (collection, id),
            ).fetchone()
        return self._row_to_doc(*row) if row else None

    def put(self, collection: str, id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        data = {k: v for k, v in fields.items() if k != "id"}
        payload = dumps(data)
        with self._get_connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO documents (collection, id, data) VALUES (?, ?, ?)",
                (collection, id, payload),
            )
        return self._row_to_doc(id, payload)

    def update(self, collection: str, id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT data FROM documents WHERE collection = ? AND id = ?",
                (collection, id),
            ).fetchone()
            if row is None:
                raise NotFoundError(collection, id)
            data = json.loads(row[0])
            data.update({k: v for k, v in fields.items() if k != "id"})
            payload = dumps(data)
            conn.execute(
                "UPDATE documents SET data = ? WHERE collection = ? AND id = ?",
                (payload, collection, id),
            )
        return self._row_to_doc(id, payload)

    def delete(self, collection: str, id: str) -> None:
        with self._get_connection() as conn:
            conn.execute(
                "DELETE FROM documents WHERE collection = ? AND id = ?",
                (collection, id),
            )

    # =============================================================================
    # QUERIES
    # =============================================================================

    def query(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        order_desc: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        sql = "SELECT id, data FROM documents WHERE collection = ?"
        params: List[Any] = [collection]

        for key, value in (filters or {}).items():
            if value is None:
                sql += " AND json_extract(data, ?) IS NULL"
                params.append(_json_path(key))
            else:
                sql += " AND json_extract(data, ?) = ?"
                params.extend([_json_path(key), _encode(value) if isinstance(value, (datetime, date)) else value])

        if order_by:
            direction = "DESC" if order_desc else "ASC"
            sql += f" ORDER BY json_extract(data, ?) {direction}"
            params.append(_json_path(order_by))

        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))

        with self._get_connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._row_to_doc(id, data) for id, data in rows]

    # =============================================================================
    # BATCHES
    # =============================================================================

    def batch_delete(self, refs: List[DocumentRef]) -> int:
        self._check_batch(refs)
        with self._get_connection() as conn:
            conn.executemany(
                "DELETE FROM documents WHERE collection = ? AND id = ?",
                [(ref.collection, ref.id) for ref in refs],
            )
        return len(refs)
