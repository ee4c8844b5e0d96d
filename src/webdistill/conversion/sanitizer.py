"""Scrubbing of active content from untrusted HTML."""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

# Elements that can execute code, load other documents or rewrite URLs
REMOVE_SELECTORS = [
    "script:not([type='application/ld+json'])",
    "iframe",
    "frame",
    "frameset",
    "object",
    "embed",
    "applet",
    "base",
    "template",
    "portal",
    "meta[http-equiv='refresh' i]",
    "link[rel~='import']",
    "link[rel~='modulepreload']",
    "link[rel~='preload'][as='script']",
    "link[rel~='prefetch'][as='script']",
]

URL_ATTRIBUTES = frozenset(
    {"href", "src", "action", "xlink:href", "background", "poster", "data", "cite", "formaction"}
)
FORBIDDEN_ATTRIBUTES = frozenset({"srcdoc", "formaction"})

# Browsers ignore ASCII control characters and whitespace inside schemes
_SCHEME_NOISE = re.compile(r"[\x00-\x20\x7f]+")
_UNSAFE_SCHEMES = ("javascript:", "vbscript:")
_SAFE_DATA_PREFIX = "data:image/"


def is_unsafe_url(value: str) -> bool:
    """True if ``value`` would run script or smuggle a non-image payload."""
    compact = _SCHEME_NOISE.sub("", value).lower()
    if compact.startswith(_UNSAFE_SCHEMES):
        return True
    if compact.startswith("data:"):
        return not compact.startswith(_SAFE_DATA_PREFIX) or compact.startswith("data:image/svg")
    return False


class HtmlSanitizer:
    """
    Removes active content from HTML before it is parsed for extraction.

    Class names, ids and semantic markup are kept; the readability scorer
    relies on them. JSON-LD data blocks are kept because browsers never
    execute them and page metadata is read from them.

    Example:
        sanitizer = HtmlSanitizer()
        safe_html = sanitizer.sanitize(raw_html)
    """

    def _remove_elements(self, soup: BeautifulSoup) -> int:
        removed = 0
        for selector in REMOVE_SELECTORS:
            for el in soup.select(selector):
                el.decompose()
                removed += 1
        return removed

    def _clean_attributes(self, tag: Tag) -> None:
        # Collect first; attrs can't change while iterating
        to_remove = []
        for name, value in tag.attrs.items():
            lowered = name.lower()
            if lowered.startswith("on") or lowered in FORBIDDEN_ATTRIBUTES:
                to_remove.append(name)
            elif lowered in URL_ATTRIBUTES and isinstance(value, str) and is_unsafe_url(value):
                to_remove.append(name)
        for name in to_remove:
            del tag[name]

    def sanitize(self, html: str) -> str:
        """
        Return ``html`` with active elements and attributes removed.

        Args:
            html: Untrusted HTML document or fragment

        Returns:
            Serialized HTML that is safe to parse and render
        """
        soup = BeautifulSoup(html, "html.parser")
        removed = self._remove_elements(soup)
        for tag in soup.find_all(True):
            self._clean_attributes(tag)
        if removed:
            logger.debug(f"Sanitizer removed {removed} active elements")
        return str(soup)
