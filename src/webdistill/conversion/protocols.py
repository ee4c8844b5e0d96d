"""Protocol definitions for the conversion stages."""

from typing import Optional, Protocol

from ..models.document import Article, StructuredMeta
from .dom import ParsedDocument


class ContentExtractor(Protocol):
    """
    Isolates the main article of a parsed page.

    Implementations must not mutate ``doc``; the structured pass reads
    the same tree.
    """

    def extract(self, doc: ParsedDocument) -> Article:
        """
        Raises:
            ExtractionFailed: No usable article was found
        """
        ...


class MetadataExtractor(Protocol):
    """Harvests headings, links, images and site-specific facts."""

    def extract(self, doc: ParsedDocument, raw_html: Optional[str] = None) -> StructuredMeta: ...


class MarkdownRenderer(Protocol):
    """Renders content HTML as Markdown."""

    def serialize(self, content_html: str) -> str: ...
