# src/therapy_center/adapters/store/supabase.py
"""
Supabase Document Store Adapter

Implements DocumentStorePort on one Postgres table exposed through PostgREST:

    create table documents (
        collection text not null,
        id text not null,
        data jsonb not null,
        primary key (collection, id)
    );

Field updates go through a server-side merge so concurrent writers touching
different fields do not overwrite each other:

    create function merge_document(p_collection text, p_id text, p_patch jsonb)
    returns jsonb language sql as $$
        update documents set data = data || p_patch
        where collection = p_collection and id = p_id
        returning data
    $$;

Equality filters use jsonb containment on data; ordering uses data->field.
Unbounded queries are read in pages because PostgREST caps every response
at its max-rows setting. This is the production adapter.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from ...core.ports.store import DEFAULT_BATCH_LIMIT, DocumentRef, DocumentStorePort
from ...errors import NotFoundError, StoreUnavailableError
from .sqlite import dumps

logger = logging.getLogger(__name__)

# PostgREST default max-rows
DEFAULT_PAGE_SIZE = 1000


class SupabaseDocumentStore(DocumentStorePort):
    """
    Supabase implementation of DocumentStorePort.

    Batch deletes issue one request per collection in the batch, so a batch
    spanning several collections is not atomic as a whole.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        key: Optional[str] = None,
        table: str = "documents",
        batch_limit: int = DEFAULT_BATCH_LIMIT,
        client: Optional[Client] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        merge_function: str = "merge_document",
    ):
        """
        Initialize Supabase adapter.

        Args:
            url: Supabase project URL (defaults to SUPABASE_URL env var)
            key: Supabase service key (defaults to SUPABASE_KEY env var)
            table: Name of the documents table
            batch_limit: Maximum refs per batch delete
            client: Pre-built client (tests)
            page_size: Rows per request when reading a whole collection
            merge_function: Name of the jsonb merge function used by update
        """
        self._table = table
        self.batch_limit = batch_limit
        self.page_size = page_size
        self._merge_function = merge_function

        if client is None:
            url = url or os.getenv("SUPABASE_URL")
            key = key or os.getenv("SUPABASE_KEY")
            if not url or not key:
                raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set")
            client = create_client(url, key)

        self._client: Client = client
        logger.info(f"SupabaseDocumentStore initialized (table={table})")

    @property
    def client(self) -> Client:
        """Get the underlying Supabase client."""
        return self._client

    def _documents(self):
        return self._client.table(self._table)

    @staticmethod
    def _row_to_doc(row: Dict[str, Any]) -> Dict[str, Any]:
        doc = dict(row.get("data") or {})
        doc["id"] = row["id"]
        return doc

    @staticmethod
    def _jsonable(fields: Dict[str, Any]) -> Dict[str, Any]:
        return json.loads(dumps({k: v for k, v in fields.items() if k != "id"}))

    def _execute(self, action: str, request):
        try:
            return request.execute()
        except Exception as e:
            logger.error(f"Supabase error during {action}: {e}")
            raise StoreUnavailableError("Document store unavailable", detail=str(e)) from e

    # =============================================================================
    # SINGLE DOCUMENT OPERATIONS
    # =============================================================================

    def get(self, collection: str, id: str) -> Optional[Dict[str, Any]]:
        result = self._execute(
            f"get {collection}/{id}",
            self._documents()
            .select("id, data")
            .eq("collection", collection)
            .eq("id", id)
            .limit(1),
        )
        return self._row_to_doc(result.data[0]) if result.data else None

    def put(self, collection: str, id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        data = self._jsonable(fields)
        self._execute(
            f"put {collection}/{id}",
            self._documents().upsert({"collection": collection, "id": id, "data": data}),
        )
        return {**data, "id": id}

    def update(self, collection: str, id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        result = self._execute(
            f"update {collection}/{id}",
            self._client.rpc(
                self._merge_function,
                {"p_collection": collection, "p_id": id, "p_patch": self._jsonable(fields)},
            ),
        )
        if result.data is None:
            raise NotFoundError(collection, id)
        return {**result.data, "id": id}

    def delete(self, collection: str, id: str) -> None:
        self._execute(
            f"delete {collection}/{id}",
            self._documents().delete().eq("collection", collection).eq("id", id),
        )

    # =============================================================================
    # QUERIES
    # =============================================================================

    def _select(
        self,
        collection: str,
        filters: Dict[str, Any],
        order_by: Optional[str],
        order_desc: bool,
    ):
        request = self._documents().select("id, data").eq("collection", collection)

        null_fields = [k for k, v in filters.items() if v is None]
        matches = self._jsonable({k: v for k, v in filters.items() if v is not None})

        if matches:
            request = request.contains("data", matches)
        for field in null_fields:
            request = request.is_(f"data->>{field}", "null")

        if order_by:
            request = request.order(f"data->{order_by}", desc=order_desc)
        return request

    def query(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        order_desc: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        filters = filters or {}

        if limit is not None:
            request = self._select(collection, filters, order_by, order_desc).limit(limit)
            result = self._execute(f"query {collection}", request)
            return [self._row_to_doc(row) for row in result.data or []]

        # Page until a short page; id breaks ties so pages do not overlap
        rows: List[Dict[str, Any]] = []
        start = 0
        while True:
            request = (
                self._select(collection, filters, order_by, order_desc)
                .order("id")
                .range(start, start + self.page_size - 1)
            )
            page = self._execute(f"query {collection}", request).data or []
            rows.extend(page)
            if len(page) < self.page_size:
                break
            start += self.page_size

        if start:
            logger.debug(f"Read {len(rows)} {collection} rows in {start // self.page_size + 1} pages")
        return [self._row_to_doc(row) for row in rows]

    # =============================================================================
    # BATCHES
    # =============================================================================

    def batch_delete(self, refs: List[DocumentRef]) -> int:
        self._check_batch(refs)
        by_collection: Dict[str, List[str]] = {}
        for ref in refs:
            by_collection.setdefault(ref.collection, []).append(ref.id)

        for collection, ids in by_collection.items():
            self._execute(
                f"batch delete {collection}",
                self._documents().delete().eq("collection", collection).in_("id", ids),
            )
        return len(refs)
