"""Article metadata from JSON-LD, meta tags and the document title."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from .dom import ParsedDocument, normalize_space

logger = logging.getLogger(__name__)

JSONLD_ARTICLE_TYPES = frozenset(
    {
        "Article",
        "AdvertiserContentArticle",
        "NewsArticle",
        "AnalysisNewsArticle",
        "OpinionNewsArticle",
        "ReportageNewsArticle",
        "ReviewNewsArticle",
        "Report",
        "SatiricalArticle",
        "ScholarlyArticle",
        "MedicalScholarlyArticle",
        "SocialMediaPosting",
        "BlogPosting",
        "LiveBlogPosting",
        "DiscussionForumPosting",
        "TechArticle",
        "APIReference",
        "WebPage",
    }
)

TITLE_META = (
    "dc:title",
    "dcterm:title",
    "og:title",
    "weibo:article:title",
    "weibo:webpage:title",
    "title",
    "twitter:title",
)
BYLINE_META = ("dc:creator", "dcterm:creator", "author", "parsely-author")
EXCERPT_META = (
    "dc:description",
    "dcterm:description",
    "og:description",
    "weibo:article:description",
    "weibo:webpage:description",
    "description",
    "twitter:description",
)
SITE_NAME_META = ("og:site_name", "application-name")
PUBLISHED_META = ("article:published_time", "parsely-pub-date", "dc:date", "dcterm:date")

TITLE_SEPARATORS = r"\|\-–—\\/>»"
_SEPARATOR_SPACED = re.compile(rf" [{TITLE_SEPARATORS}] ")
_HIERARCHICAL_SEPARATOR = re.compile(r" [\\/>»] ")
_STRIP_LAST_SEGMENT = re.compile(rf"(.*)[{TITLE_SEPARATORS}] .*")
_STRIP_FIRST_SEGMENT = re.compile(rf"[^{TITLE_SEPARATORS}]*[{TITLE_SEPARATORS}](.*)")
_CDATA = re.compile(r"^\s*<!\[CDATA\[|\]\]>\s*$")


@dataclass
class PageMeta:
    title: str = ""
    byline: Optional[str] = None
    excerpt: Optional[str] = None
    site_name: Optional[str] = None
    published_time: Optional[str] = None


def _word_count(text: str) -> int:
    return len(text.split())


def _jsonld_objects(data: Any) -> list[dict[str, Any]]:
    if isinstance(data, list):
        return [obj for item in data for obj in _jsonld_objects(item)]
    if not isinstance(data, dict):
        return []
    objects = [data]
    graph = data.get("@graph")
    if isinstance(graph, list):
        objects.extend(obj for obj in graph if isinstance(obj, dict))
    return objects


def _is_article_type(obj: dict[str, Any]) -> bool:
    types = obj.get("@type")
    if isinstance(types, str):
        types = [types]
    return isinstance(types, list) and any(t in JSONLD_ARTICLE_TYPES for t in types)


def _name_of(value: Any) -> Optional[str]:
    """Flatten a schema.org Person/Organization (or list of them) to a string."""
    if isinstance(value, str):
        return normalize_space(value) or None
    if isinstance(value, dict):
        return _name_of(value.get("name"))
    if isinstance(value, list):
        names = [name for name in (_name_of(item) for item in value) if name]
        return ", ".join(names) or None
    return None


def _text_of(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return normalize_space(value) or None
    return None


def _from_jsonld(doc: ParsedDocument) -> PageMeta:
    meta = PageMeta()
    for script in doc.select("script[type='application/ld+json']"):
        raw = _CDATA.sub("", script.string or script.get_text())
        try:
            data = json.loads(raw)
        except ValueError:
            logger.debug(f"Skipping malformed JSON-LD block on {doc.base_url}")
            continue

        for obj in _jsonld_objects(data):
            if not _is_article_type(obj):
                continue
            name, headline = _text_of(obj.get("name")), _text_of(obj.get("headline"))
            meta.title = headline or name or ""
            meta.byline = _name_of(obj.get("author"))
            meta.excerpt = _text_of(obj.get("description"))
            meta.site_name = _name_of(obj.get("publisher"))
            meta.published_time = _text_of(obj.get("datePublished"))
            return meta
    return meta


def clean_document_title(doc: ParsedDocument) -> str:
    """
    Trim site names off the ``<title>`` text.

    ``"How it works | Example Blog"`` becomes ``"How it works"``. Titles
    that would shrink to four words or fewer are kept whole unless the
    page used a breadcrumb style separator.
    """
    original = doc.title
    if not original:
        return ""

    title = original
    hierarchical = False

    if _SEPARATOR_SPACED.search(title):
        hierarchical = bool(_HIERARCHICAL_SEPARATOR.search(title))
        title = _STRIP_LAST_SEGMENT.sub(r"\1", original)
        if _word_count(title) < 3:
            title = _STRIP_FIRST_SEGMENT.sub(r"\1", original)
    elif ": " in title:
        headings = {doc.text(h) for h in doc.find_all(["h1", "h2"])}
        if title.strip() not in headings:
            title = original[original.rfind(":") + 1 :]
            if _word_count(title) < 3:
                title = original[original.find(":") + 1 :]
            elif _word_count(original[: original.find(":")]) > 5:
                title = original
    elif len(title) > 150 or len(title) < 15:
        h1s = doc.find_all("h1")
        if len(h1s) == 1:
            title = doc.text(h1s[0])

    title = normalize_space(title)
    word_count = _word_count(title)
    if word_count <= 4 and (
        not hierarchical
        or word_count != _word_count(re.sub(rf"[{TITLE_SEPARATORS}]+", "", original)) - 1
    ):
        title = original
    return title


def extract_page_meta(doc: ParsedDocument) -> PageMeta:
    """
    Collect title, byline, excerpt, site name and publish time.

    Each field takes the first value found in JSON-LD, then
    OpenGraph/Twitter/Dublin Core meta tags, then the document itself.
    """
    jsonld = _from_jsonld(doc)
    return PageMeta(
        title=jsonld.title or doc.meta(*TITLE_META) or clean_document_title(doc),
        byline=jsonld.byline or doc.meta(*BYLINE_META),
        excerpt=jsonld.excerpt or doc.meta(*EXCERPT_META),
        site_name=jsonld.site_name or doc.meta(*SITE_NAME_META),
        published_time=jsonld.published_time or doc.meta(*PUBLISHED_META),
    )
