"""Headings, links, images and encyclopedia facts of a page."""

from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

from ..models.document import Heading, Image, Link, StructuredMeta, WikipediaMeta
from .dom import ParsedDocument

logger = logging.getLogger(__name__)

T = TypeVar("T")

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
SKIPPED_LINK_PREFIXES = ("#", "javascript:", "mailto:", "tel:", "data:")
WIKIPEDIA_DOMAIN = "wikipedia.org"


def is_wikipedia_host(host: str) -> bool:
    return host == WIKIPEDIA_DOMAIN or host.endswith("." + WIKIPEDIA_DOMAIN)


class StructuredExtractor:
    """
    Read-only harvest of page structure, independent of the article pass.

    Every sub-extraction is guarded on its own: a failure is logged and
    contributes an empty value instead of failing the request.

    Example:
        extractor = StructuredExtractor()
        meta = extractor.extract(doc, raw_html=html)
        print(len(meta.links), meta.language)
    """

    def __init__(self, max_links: int = 100, max_references: int = 50):
        self.max_links = max_links
        self.max_references = max_references

    def _guarded(self, name: str, func: Callable[[], T], default: T, url: str) -> T:
        try:
            return func()
        except Exception as e:
            logger.warning(f"Structured extraction of {name} failed for {url}: {e}")
            return default

    def extract(self, doc: ParsedDocument, raw_html: Optional[str] = None) -> StructuredMeta:
        """
        Collect structured metadata from ``doc``.

        Args:
            doc: Parsed (sanitized) page
            raw_html: Original unsanitized markup, re-parsed for the
                Wikipedia pass only

        Returns:
            StructuredMeta; ``wikipedia`` is set only for wikipedia.org
            hosts with at least one non-empty field
        """
        url = doc.base_url
        meta = StructuredMeta(
            headings=self._guarded("headings", lambda: self.extract_headings(doc), [], url),
            links=self._guarded("links", lambda: self.extract_links(doc), [], url),
            images=self._guarded("images", lambda: self.extract_images(doc), [], url),
            language=self._guarded("language", lambda: doc.lang, None, url),
        )

        if is_wikipedia_host(doc.host):
            source = ParsedDocument.parse(raw_html, url) if raw_html is not None else doc
            wikipedia = self.extract_wikipedia(source)
            if not wikipedia.is_empty():
                meta.wikipedia = wikipedia

        return meta

    def extract_headings(self, doc: ParsedDocument) -> list[Heading]:
        headings = []
        for tag in doc.find_all(HEADING_TAGS):
            text = doc.text(tag)
            if text:
                headings.append(Heading(level=int(tag.name[1]), text=text))
        return headings

    def extract_links(self, doc: ParsedDocument) -> list[Link]:
        """Unique outbound links in document order, stopping at ``max_links``."""
        links: list[Link] = []
        seen: set[str] = set()
        for a in doc.find_all("a", href=True):
            if len(links) >= self.max_links:
                break
            href = doc.attr(a, "href")
            if not href or href.lower().startswith(SKIPPED_LINK_PREFIXES):
                continue
            resolved = doc.resolve_url(href)
            if resolved is None or resolved in seen:
                continue
            seen.add(resolved)
            links.append(Link(text=doc.text(a), href=resolved))
        return links

    def extract_images(self, doc: ParsedDocument) -> list[Image]:
        images = []
        for img in doc.find_all("img"):
            src = doc.resolve_url(doc.attr(img, "src")) or doc.resolve_url(doc.attr(img, "data-src"))
            if src:
                images.append(Image(src=src, alt=doc.attr(img, "alt") or ""))
        return images

    def extract_wikipedia(self, doc: ParsedDocument) -> WikipediaMeta:
        url = doc.base_url
        return WikipediaMeta(
            infobox=self._guarded("infobox", lambda: self._infobox(doc), {}, url),
            categories=self._guarded("categories", lambda: self._categories(doc), [], url),
            references=self._guarded("references", lambda: self._references(doc), [], url),
        )

    def _infobox(self, doc: ParsedDocument) -> dict[str, str]:
        infobox: dict[str, str] = {}
        table = doc.select_one(".infobox")
        if table is None:
            return infobox
        for row in table.find_all("tr"):
            th, td = row.find("th"), row.find("td")
            key, value = doc.text(th), doc.text(td)
            if key and value:
                infobox[key] = value
        return infobox

    def _categories(self, doc: ParsedDocument) -> list[str]:
        return [text for text in (doc.text(a) for a in doc.select("#mw-normal-catlinks ul li a")) if text]

    def _references(self, doc: ParsedDocument) -> list[str]:
        references = []
        for li in doc.select(".references li"):
            if len(references) >= self.max_references:
                break
            text = doc.text(li)
            if text:
                references.append(text)
        return references
