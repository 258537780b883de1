"""HTTP client stores for the dashboard API."""

from .stores import (
    BusinessDocumentStore,
    Dashboard,
    FlowStore,
    PromptStore,
    Store,
    StoreError,
)

__all__ = [
    "BusinessDocumentStore",
    "Dashboard",
    "FlowStore",
    "PromptStore",
    "Store",
    "StoreError",
]
