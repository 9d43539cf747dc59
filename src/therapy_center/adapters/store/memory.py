# src/therapy_center/adapters/store/memory.py
"""
In-Memory Document Store Adapter

Implements DocumentStorePort over nested dicts. Used by the test suite and
for throwaway demo runs; nothing is persisted.
"""

import copy
import logging
import threading
from typing import Any, Dict, List, Optional

from ...core.ports.store import DEFAULT_BATCH_LIMIT, DocumentRef, DocumentStorePort
from ...errors import NotFoundError

logger = logging.getLogger(__name__)


def sort_key(field: str):
    """Order key matching SQL semantics: missing/None values sort first."""
    def _key(doc: Dict[str, Any]):
        value = doc.get(field)
        return (value is not None, value)
    return _key


class InMemoryDocumentStore(DocumentStorePort):
    """Dict-backed DocumentStorePort. Thread-safe; every read returns a copy."""

    def __init__(self, batch_limit: int = DEFAULT_BATCH_LIMIT):
        self.batch_limit = batch_limit
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.RLock()
        logger.info("InMemoryDocumentStore initialized")

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(name, {})

    @staticmethod
    def _with_id(id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        doc = copy.deepcopy(data)
        doc["id"] = id
        return doc

    # =============================================================================
    # SINGLE DOCUMENT OPERATIONS
    # =============================================================================

    def get(self, collection: str, id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            data = self._collection(collection).get(id)
            return self._with_id(id, data) if data is not None else None

    def put(self, collection: str, id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        data = {k: v for k, v in copy.deepcopy(fields).items() if k != "id"}
        with self._lock:
            self._collection(collection)[id] = data
            return self._with_id(id, data)

    def update(self, collection: str, id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            data = self._collection(collection).get(id)
            if data is None:
                raise NotFoundError(collection, id)
            data.update({k: v for k, v in copy.deepcopy(fields).items() if k != "id"})
            return self._with_id(id, data)

    def delete(self, collection: str, id: str) -> None:
        with self._lock:
            self._collection(collection).pop(id, None)

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
        with self._lock:
            docs = [
                self._with_id(id, data)
                for id, data in self._collection(collection).items()
            ]

        if filters:
            docs = [
                d for d in docs
                if all(d.get(key) == value for key, value in filters.items())
            ]

        if order_by:
            docs.sort(key=sort_key(order_by), reverse=order_desc)

        if limit is not None:
            docs = docs[:limit]

        return docs

    # =============================================================================
    # BATCHES
    # =============================================================================

    def batch_delete(self, refs: List[DocumentRef]) -> int:
        self._check_batch(refs)
        with self._lock:
            for ref in refs:
                self._collection(ref.collection).pop(ref.id, None)
        return len(refs)

    def count(self, collection: str) -> int:
        """Number of documents in a collection."""
        with self._lock:
            return len(self._collection(collection))
