# src/therapy_center/core/ports/__init__.py
"""
Port interfaces the services depend on.

Adapters under therapy_center.adapters implement these.
"""

from .store import DEFAULT_BATCH_LIMIT, DocumentRef, DocumentStorePort

__all__ = [
    "DEFAULT_BATCH_LIMIT",
    "DocumentRef",
    "DocumentStorePort",
]
