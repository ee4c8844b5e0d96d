"""Parsed HTML tree anchored to its source URL."""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Doctype, Tag


def normalize_space(text: str) -> str:
    """Collapse runs of whitespace into single spaces and trim."""
    return " ".join(text.split())


class ParsedDocument:
    """
    A BeautifulSoup tree owned by a single request.

    Wraps the soup with the base URL needed to absolutize links and a few
    accessors the extractors share. Never hand one instance to two requests;
    the article cleaner works on copies but callers are free to mutate.

    Example:
        doc = ParsedDocument.parse(html, "https://example.com/post")
        for a in doc.select("a[href]"):
            print(doc.resolve_url(a["href"]))
    """

    def __init__(self, soup: BeautifulSoup, base_url: str):
        self.soup = soup
        self.base_url = base_url

    @classmethod
    def parse(cls, html: str, base_url: str) -> ParsedDocument:
        """
        Parse ``html`` with the stdlib parser.

        ``html.parser`` does not infer omitted tags, so when the markup has
        no ``<body>`` one is synthesized around everything outside
        ``<head>``.
        """
        soup = BeautifulSoup(html, "html.parser")
        if soup.find("body") is None:
            _wrap_body(soup)
        return cls(soup, base_url)

    @property
    def host(self) -> str:
        return (urlparse(self.base_url).hostname or "").lower()

    @property
    def body(self) -> Tag:
        body = self.soup.find("body")
        return body if isinstance(body, Tag) else self.soup

    @property
    def lang(self) -> Optional[str]:
        html = self.soup.find("html")
        if isinstance(html, Tag):
            value = html.get("lang")
            if isinstance(value, str) and value.strip():
                return value.strip()
        return None

    @property
    def title(self) -> str:
        tag = self.soup.find("title")
        return self.text(tag) if isinstance(tag, Tag) else ""

    def select(self, selector: str) -> list[Tag]:
        return list(self.soup.select(selector))

    def select_one(self, selector: str) -> Optional[Tag]:
        return self.soup.select_one(selector)

    def find_all(self, name: Any = True, **kwargs: Any) -> list[Tag]:
        return [el for el in self.soup.find_all(name, **kwargs) if isinstance(el, Tag)]

    @staticmethod
    def text(tag: Optional[Tag]) -> str:
        """Whitespace-normalized text content of ``tag``."""
        if tag is None:
            return ""
        return normalize_space(tag.get_text(" "))

    @staticmethod
    def attr(tag: Tag, name: str) -> Optional[str]:
        value = tag.get(name)
        if isinstance(value, list):
            value = " ".join(value)
        if value is None:
            return None
        return value.strip() or None

    def meta(self, *names: str) -> Optional[str]:
        """
        First non-empty ``<meta>`` content matching one of ``names``.

        Both ``name`` and ``property`` attributes are matched,
        case-insensitively, and ``names`` are tried in order.
        """
        found: dict[str, str] = {}
        for tag in self.soup.find_all("meta"):
            content = tag.get("content")
            if not isinstance(content, str) or not content.strip():
                continue
            for key in ("name", "property", "itemprop"):
                value = tag.get(key)
                if isinstance(value, str):
                    found.setdefault(value.strip().lower(), normalize_space(content))
        for name in names:
            value = found.get(name.lower())
            if value:
                return value
        return None

    def resolve_url(self, href: Optional[str]) -> Optional[str]:
        """
        Absolutize ``href`` against the base URL.

        Returns:
            An absolute http(s) URL, or None when ``href`` is empty,
            malformed or uses any other scheme. Never raises.
        """
        if not href or not isinstance(href, str):
            return None
        href = href.strip()
        if not href:
            return None
        try:
            if href.startswith("//") and not urlparse(href).netloc:
                return None
            resolved = urljoin(self.base_url, href)
            parsed = urlparse(resolved)
            if parsed.scheme not in ("http", "https") or not parsed.hostname:
                return None
            # Raises for ports outside 0-65535
            if parsed.port == 0:
                return None
        except ValueError:
            return None
        return resolved


def _wrap_body(soup: BeautifulSoup) -> None:
    root = soup.find("html")
    if not isinstance(root, Tag):
        root = soup
    body = soup.new_tag("body")
    for child in list(root.contents):
        if isinstance(child, Doctype) or (isinstance(child, Tag) and child.name in ("head", "html")):
            continue
        body.append(child.extract())
    root.append(body)


def html_to_text(html: str) -> str:
    """Whitespace-normalized text of an HTML fragment."""
    return normalize_space(BeautifulSoup(html, "html.parser").get_text(" "))
