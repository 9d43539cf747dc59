# src/therapy_center/repositories/base.py
"""
Base Repository - typed access to one document collection.

Wraps a DocumentStorePort and maps stored documents to a domain model
(any DocumentModel dataclass). Concrete repositories add the
collection-specific queries the services need.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from ..core.models import DocumentModel
from ..core.ports.store import DocumentRef, DocumentStorePort
from ..errors import NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DocumentModel)


@dataclass
class QueryOptions:
    """Options for repository queries."""
    filters: Dict[str, Any] = field(default_factory=dict)
    order_by: Optional[str] = None
    order_desc: bool = False
    limit: Optional[int] = None


class BaseRepository(Generic[T]):
    """
    Repository over a single collection.

    Subclasses set `collection`, `model` and `resource` (the human-readable
    name used in NotFound errors).
    """

    collection: str = ""
    model: Type[T]
    resource: str = "Document"

    def __init__(self, store: DocumentStorePort):
        self.store = store

    def _to_model(self, doc: Dict[str, Any]) -> T:
        return self.model.from_doc(doc)

    def ref(self, entity_id: str) -> DocumentRef:
        return DocumentRef(self.collection, entity_id)

    # --- Read ---

    def get_by_id(self, entity_id: str) -> Optional[T]:
        """Get a single entity by its ID, or None."""
        if not entity_id:
            return None
        doc = self.store.get(self.collection, entity_id)
        return self._to_model(doc) if doc is not None else None

    def require(self, entity_id: str) -> T:
        """Get a single entity by its ID or raise NotFoundError."""
        entity = self.get_by_id(entity_id)
        if entity is None:
            raise NotFoundError(self.resource, entity_id)
        return entity

    def exists(self, entity_id: str) -> bool:
        return self.get_by_id(entity_id) is not None

    def get_all(self, options: Optional[QueryOptions] = None) -> List[T]:
        """Get all entities matching the query options."""
        options = options or QueryOptions()
        docs = self.store.query(
            self.collection,
            filters=options.filters or None,
            order_by=options.order_by,
            order_desc=options.order_desc,
            limit=options.limit,
        )
        return [self._to_model(d) for d in docs]

    def find(self, **filters: Any) -> List[T]:
        """Shorthand for an equality-filtered get_all."""
        return self.get_all(QueryOptions(filters=filters))

    def find_one(self, **filters: Any) -> Optional[T]:
        found = self.get_all(QueryOptions(filters=filters, limit=1))
        return found[0] if found else None

    # --- Write ---

    def create(self, entity: T) -> T:
        """Persist a new entity, assigning an id when it has none."""
        if not entity.id:
            entity.id = self.store.new_id()
        doc = self.store.put(self.collection, entity.id, entity.to_doc())
        return self._to_model(doc)

    def save(self, entity: T) -> T:
        """Overwrite the stored document with the entity's current state."""
        doc = self.store.put(self.collection, entity.id, entity.to_doc())
        return self._to_model(doc)

    def update(self, entity_id: str, fields: Dict[str, Any]) -> T:
        """Merge document fields into an existing entity. Raises NotFoundError if absent."""
        try:
            doc = self.store.update(self.collection, entity_id, fields)
        except NotFoundError:
            raise NotFoundError(self.resource, entity_id)
        return self._to_model(doc)

    def delete(self, entity_id: str) -> None:
        """Delete by ID; absent ids are ignored."""
        self.store.delete(self.collection, entity_id)
