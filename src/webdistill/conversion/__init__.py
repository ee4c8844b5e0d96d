"""Content conversion for webdistill (sanitize, parse, extract, Markdown)."""

from .dom import ParsedDocument
from .markdown import MarkdownSerializer
from .page_meta import PageMeta, extract_page_meta
from .protocols import ContentExtractor, MarkdownRenderer, MetadataExtractor
from .readability import ArticleExtractor
from .sanitizer import HtmlSanitizer
from .structured import StructuredExtractor

__all__ = [
    # Protocols
    "ContentExtractor",
    "MarkdownRenderer",
    "MetadataExtractor",
    # Implementations
    "ArticleExtractor",
    "HtmlSanitizer",
    "MarkdownSerializer",
    "PageMeta",
    "ParsedDocument",
    "StructuredExtractor",
    "extract_page_meta",
]
