"""In-process document store."""

from __future__ import annotations

import dataclasses
import logging
import uuid
from typing import Any, Optional

from ..errors import PersistenceError
from ..models.document import Document
from .protocols import UPDATABLE_FIELDS

logger = logging.getLogger(__name__)


class InMemoryDocumentStore:
    """
    Keeps documents in a dict for the life of the process.

    Stored and returned documents are copies, so callers can't change
    persisted state by mutating what they hold.
    """

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}

    async def create(self, document: Document) -> str:
        doc_id = uuid.uuid4().hex
        self._documents[doc_id] = dataclasses.replace(document, id=doc_id)
        return doc_id

    async def count(self, owner: Optional[str] = None) -> int:
        if owner is None:
            return len(self._documents)
        return sum(1 for doc in self._documents.values() if doc.owner == owner)

    async def find_by_id(self, doc_id: str) -> Optional[Document]:
        document = self._documents.get(doc_id)
        return dataclasses.replace(document) if document is not None else None

    async def update(self, doc_id: str, **fields: Any) -> None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise PersistenceError(f"Cannot update fields: {sorted(unknown)}")
        document = self._documents.get(doc_id)
        if document is None:
            raise PersistenceError(f"Document {doc_id} not found")
        self._documents[doc_id] = dataclasses.replace(document, **fields)
        logger.debug(f"Updated document {doc_id}: {sorted(fields)}")
