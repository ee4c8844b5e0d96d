"""Protocol for the document store collaborator."""

from typing import Any, Optional, Protocol, runtime_checkable

from ..models.document import Document

# Fields a caller may change after creation
UPDATABLE_FIELDS = frozenset(
    {"title", "site_name", "markdown", "content_html", "plain_text", "needs_transcript", "structured_meta"}
)


@runtime_checkable
class DocumentStore(Protocol):
    """
    Narrow persistence interface used by the distiller.

    Every method raises ``PersistenceError`` when the backend fails.
    """

    async def create(self, document: Document) -> str:
        """Persist a fully assembled document and return its new id."""
        ...

    async def count(self, owner: Optional[str] = None) -> int:
        """Number of stored documents, optionally for one owner."""
        ...

    async def find_by_id(self, doc_id: str) -> Optional[Document]: ...

    async def update(self, doc_id: str, **fields: Any) -> None:
        """
        Overwrite ``fields`` on an existing document.

        Raises:
            PersistenceError: Unknown id, unknown field or backend failure
        """
        ...
