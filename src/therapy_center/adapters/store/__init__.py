# src/therapy_center/adapters/store/__init__.py
"""
Document store adapters.

Contains concrete implementations of DocumentStorePort for different backends.
The Supabase adapter is imported lazily by the container so the client
library is only loaded when it is selected.
"""

from .memory import InMemoryDocumentStore
from .sqlite import SQLiteDocumentStore

__all__ = [
    "InMemoryDocumentStore",
    "SQLiteDocumentStore",
]
