# src/therapy_center/core/ports/store.py
"""
Document Store Port Interface

Abstract interface for the schemaless collection store the services run on.
Implementations:
- InMemoryDocumentStore (tests, demos)
- SQLiteDocumentStore (local)
- SupabaseDocumentStore (production)

Documents are plain dicts keyed by field name. Every document returned by
the port carries its id under "id".
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

DEFAULT_BATCH_LIMIT = 500


@dataclass(frozen=True)
class DocumentRef:
    """Address of a single document."""
    collection: str
    id: str


class DocumentStorePort(ABC):
    """
    Abstract port interface for document store operations.

    All store adapters must implement this interface. Adapter failures are
    raised as StoreUnavailableError.
    """

    batch_limit: int = DEFAULT_BATCH_LIMIT

    # =============================================================================
    # SINGLE DOCUMENT OPERATIONS
    # =============================================================================

    @abstractmethod
    def get(self, collection: str, id: str) -> Optional[Dict[str, Any]]:
        """Get a document by id, or None if absent."""
        pass

    @abstractmethod
    def put(self, collection: str, id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Create or overwrite a document."""
        pass

    @abstractmethod
    def update(self, collection: str, id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Merge fields into an existing document. Raises NotFoundError if absent."""
        pass

    @abstractmethod
    def delete(self, collection: str, id: str) -> None:
        """Delete a document. Deleting an absent document is a no-op."""
        pass

    # =============================================================================
    # QUERIES
    # =============================================================================

    @abstractmethod
    def query(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        order_desc: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Equality-filtered query with optional ordering and limit."""
        pass

    # =============================================================================
    # BATCHES
    # =============================================================================

    @abstractmethod
    def batch_delete(self, refs: List[DocumentRef]) -> int:
        """
        Delete up to batch_limit documents as one batch.

        Returns the number of refs processed.
        """
        pass

    def delete_all(self, refs: Iterable[DocumentRef]) -> int:
        """
        Delete any number of documents in sequential batches.

        Each batch is atomic where the backend allows it; the sequence as a
        whole is not, so a failure between batches leaves earlier batches applied.
        """
        pending = list(dict.fromkeys(refs))
        deleted = 0
        for start in range(0, len(pending), self.batch_limit):
            deleted += self.batch_delete(pending[start:start + self.batch_limit])
        return deleted

    def new_id(self) -> str:
        """Generate a fresh document id."""
        return str(uuid.uuid4())

    def _check_batch(self, refs: List[DocumentRef]) -> None:
        if len(refs) > self.batch_limit:
            raise ValueError(
                f"Batch of {len(refs)} refs exceeds the limit of {self.batch_limit}"
            )
