"""Document persistence for webdistill."""

from typing import Optional

from ..models.config import StorageConfig
from .memory import InMemoryDocumentStore
from .protocols import DocumentStore
from .sqlite import SqliteDocumentStore


def create_store(config: StorageConfig) -> Optional[DocumentStore]:
    """Build the store selected by ``config.backend``, or None for ``"none"``."""
    if config.backend == "memory":
        return InMemoryDocumentStore()
    if config.backend == "sqlite":
        return SqliteDocumentStore(config.path)
    return None


__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "SqliteDocumentStore",
    "create_store",
]
