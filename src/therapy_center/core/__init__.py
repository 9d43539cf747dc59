# src/therapy_center/core/__init__.py
"""
Core layer - port interfaces, domain models and dependency wiring.

Following Ports and Adapters:
- core.ports defines how services reach the document store
- adapters provide the concrete stores
- core.container wires a configured store into the services
"""

from .ports import DocumentRef, DocumentStorePort

__all__ = [
    "DocumentRef",
    "DocumentStorePort",
]
