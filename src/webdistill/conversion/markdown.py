"""HTML to Markdown conversion."""

from __future__ import annotations

import logging
import re
from typing import Any

from bs4 import BeautifulSoup
from markdownify import MarkdownConverter

logger = logging.getLogger(__name__)

STRIP_BEFORE_CONVERT = ["script", "style", "noscript", "iframe"]


class _DocumentConverter(MarkdownConverter):
    """markdownify converter with the document output rules."""

    def convert_img(self, el: Any, text: str, *args: Any, **kwargs: Any) -> str:
        src = (el.get("src") or "").strip()
        if not src:
            return ""
        alt = (el.get("alt") or "").strip()
        return f"![{alt}]({src})"

    def convert_pre(self, el: Any, text: str, *args: Any, **kwargs: Any) -> str:
        code = el.find("code")
        language = ""
        if code is not None:
            for cls in code.get("class") or []:
                if cls.startswith("language-"):
                    language = cls[len("language-") :]
                    break
            body = code.get_text()
        else:
            body = el.get_text()
        return f"\n\n```{language}\n{body.strip(chr(10))}\n```\n\n"


class MarkdownSerializer:
    """
    Converts cleaned content HTML to Markdown.

    ATX headings, fenced code, ``-`` bullets, ``*`` emphasis and ``**``
    strong. Images without a source are dropped. Each call parses its
    input afresh, so one instance is safe to share across threads.

    Example:
        serializer = MarkdownSerializer()
        markdown = serializer.serialize(article.content_html)
    """

    def __init__(self, heading_style: str = "ATX", bullets: str = "-"):
        self._options = {
            "heading_style": heading_style,
            "bullets": bullets,
            "strong_em_symbol": "*",
            "escape_underscores": False,
            "escape_misc": False,
        }

    def _clean_output(self, markdown: str) -> str:
        markdown = markdown.replace("\r\n", "\n")
        markdown = "\n".join(line.rstrip() for line in markdown.split("\n"))
        markdown = re.sub(r"\n{3,}", "\n\n", markdown)
        return markdown.strip() + "\n"

    def serialize(self, content_html: str) -> str:
        """
        Render ``content_html`` as Markdown.

        Returns:
            Markdown ending with exactly one newline
        """
        soup = BeautifulSoup(content_html, "html.parser")
        for el in soup.find_all(STRIP_BEFORE_CONVERT):
            el.decompose()

        markdown = _DocumentConverter(**self._options).convert_soup(soup)
        return self._clean_output(markdown)
