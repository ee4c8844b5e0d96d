"""Data records flowing through the extraction pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from .config import TimeoutConfig

DEFAULT_VIDEO_TITLE = "Unknown Title"
DEFAULT_VIDEO_CHANNEL = "YouTube"


class RequestMode(str, Enum):
    """How a source URL is processed."""

    GENERIC = "generic"
    VIDEO = "video"


@dataclass
class ExtractionRequest:
    """
    A single validated unit of work.

    Attributes:
        source_url: Absolute http(s) URL to process
        mode: Generic page or video
        timeouts: Per-suspension-point timeouts for this request
        two_phase: For video requests, defer the transcript to a later call
        owner: Opaque identity passed through to the document store
    """

    source_url: str
    mode: RequestMode
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    two_phase: bool = False
    owner: Optional[str] = None


@dataclass
class RawPage:
    """Fetched page body. Discarded once parsed."""

    html: str
    final_url: str
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class Article:
    """Main content isolated by the readability pass."""

    title: str
    content_html: str
    plain_text: str
    byline: Optional[str] = None
    excerpt: Optional[str] = None
    site_name: Optional[str] = None
    published_time: Optional[str] = None

    @property
    def length(self) -> int:
        return len(self.plain_text)


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class Link:
    text: str
    href: str


@dataclass(frozen=True)
class Image:
    src: str
    alt: str = ""


@dataclass
class WikipediaMeta:
    """Encyclopedia-specific facts harvested from the unsanitized page."""

    infobox: dict[str, str] = field(default_factory=dict)
    categories: list[str] = field(default_factory=list)
    references: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.infobox or self.categories or self.references)

    def to_dict(self) -> dict[str, Any]:
        return {
            "infobox": dict(self.infobox),
            "categories": list(self.categories),
            "references": list(self.references),
        }


@dataclass
class StructuredMeta:
    """Headings, links, images and encyclopedia facts of a page."""

    headings: list[Heading] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    images: list[Image] = field(default_factory=list)
    language: Optional[str] = None
    wikipedia: Optional[WikipediaMeta] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "headings": [{"level": h.level, "text": h.text} for h in self.headings],
            "links": [{"text": link.text, "href": link.href} for link in self.links],
            "images": [{"src": img.src, "alt": img.alt} for img in self.images],
        }
        if self.language:
            result["language"] = self.language
        if self.wikipedia is not None and not self.wikipedia.is_empty():
            result["wikipedia"] = self.wikipedia.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StructuredMeta:
        wiki = data.get("wikipedia")
        return cls(
            headings=[Heading(level=h["level"], text=h["text"]) for h in data.get("headings", [])],
            links=[Link(text=link["text"], href=link["href"]) for link in data.get("links", [])],
            images=[Image(src=img["src"], alt=img.get("alt", "")) for img in data.get("images", [])],
            language=data.get("language"),
            wikipedia=WikipediaMeta(**wiki) if wiki else None,
        )


@dataclass
class VideoMetadata:
    title: str = DEFAULT_VIDEO_TITLE
    channel: str = DEFAULT_VIDEO_CHANNEL
    description: str = ""


@dataclass(frozen=True)
class TranscriptSegment:
    """One timed caption line. Offsets are in milliseconds."""

    offset_ms: int
    text: str
    duration_ms: int = 0


@dataclass
class Document:
    """
    Final output of a distillation request.

    ``markdown`` is always the serializer's rendering of ``content_html``;
    update both together through the pipeline, never by hand.
    """

    source_url: str
    title: str
    site_name: str
    markdown: str
    content_html: str
    plain_text: str
    id: Optional[str] = None
    scraped_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    structured_meta: Optional[StructuredMeta] = None
    byline: Optional[str] = None
    excerpt: Optional[str] = None
    published_time: Optional[str] = None
    needs_transcript: bool = False
    owner: Optional[str] = None
    warning: Optional[str] = None

    @property
    def word_count(self) -> int:
        return len(self.plain_text.split())

    def to_dict(self) -> dict[str, Any]:
        """Render the public success payload."""
        result: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "markdown": self.markdown,
            "content": self.content_html,
            "textContent": self.plain_text,
            "siteName": self.site_name,
            "status": "success",
            "wordCount": self.word_count,
            "scrapedAt": self.scraped_at.isoformat(),
        }
        optional = {"byline": self.byline, "excerpt": self.excerpt, "publishedTime": self.published_time}
        result.update({key: value for key, value in optional.items() if value})
        if self.structured_meta is not None:
            result.update(self.structured_meta.to_dict())
        if self.needs_transcript:
            result["needsTranscript"] = True
        if self.warning:
            result["warning"] = self.warning
        return result


@dataclass
class TranscriptResult:
    """Outcome of the two-phase transcript continuation."""

    success: bool
    markdown: Optional[str] = None
    transcript: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success}
        if self.markdown is not None:
            result["markdown"] = self.markdown
        if self.transcript is not None:
            result["transcript"] = self.transcript
        return result
