"""YouTube video metadata from an ordered chain of fallible providers."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence
from urllib.parse import quote

from ..concurrency.manager import ConcurrencyManager
from ..conversion.dom import ParsedDocument
from ..errors import FetchError
from ..http.protocols import HttpClient
from ..models.document import DEFAULT_VIDEO_CHANNEL, DEFAULT_VIDEO_TITLE, VideoMetadata
from .embedded import dig, extract_embedded_json
from .urls import extract_video_id, watch_url

logger = logging.getLogger(__name__)

OEMBED_ENDPOINT = "https://www.youtube.com/oembed?url={url}&format=json"
TITLE_SUFFIX = " - YouTube"


@dataclass
class MetadataCandidate:
    """What a single source knew about a video. Missing fields are None."""

    source: str
    confidence: float
    title: Optional[str] = None
    channel: Optional[str] = None
    description: Optional[str] = None


class MetadataProvider(Protocol):
    name: str
    confidence: float

    async def fetch(self, url: str) -> MetadataCandidate:
        """
        Raises:
            FetchError: The source could not be reached or parsed
        """
        ...


def _clean(value: object, default: Optional[str] = None) -> Optional[str]:
    """Strip ``value`` and drop it when empty or equal to the field default."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value == default:
        return None
    return value


class OEmbedProvider:
    """Structured, low-latency lookup; exact title and channel, no description."""

    name = "oembed"
    confidence = 1.0

    def __init__(self, http: HttpClient, timeout: float = 5.0):
        self._http = http
        self.timeout = timeout

    async def fetch(self, url: str) -> MetadataCandidate:
        endpoint = OEMBED_ENDPOINT.format(url=quote(url, safe=""))
        data = await self._http.get_json(endpoint, timeout=self.timeout)
        candidate = MetadataCandidate(source=self.name, confidence=self.confidence)
        if isinstance(data, dict):
            candidate.title = _clean(data.get("title"), DEFAULT_VIDEO_TITLE)
            candidate.channel = _clean(data.get("author_name"), DEFAULT_VIDEO_CHANNEL)
        return candidate


class WatchPageProvider:
    """
    Scrapes the public watch page.

    Reads OpenGraph tags and the microdata channel name, then tries the
    inline ``ytInitialData`` blob for the untruncated description. A
    blob that is missing or malformed only costs the richer description.
    """

    name = "watch_page"
    confidence = 0.6

    def __init__(
        self,
        http: HttpClient,
        timeout: float = 8.0,
        concurrency: Optional[ConcurrencyManager] = None,
    ):
        self._http = http
        self.timeout = timeout
        self._concurrency = concurrency

    async def fetch(self, url: str) -> MetadataCandidate:
        video_id = extract_video_id(url)
        page_url = watch_url(video_id) if video_id else url
        html, final_url = await self._http.get_text(page_url, timeout=self.timeout)
        if self._concurrency is not None:
            return await self._concurrency.run_cpu_bound(self.parse, html, final_url)
        return self.parse(html, final_url)

    def parse(self, html: str, url: str) -> MetadataCandidate:
        doc = ParsedDocument.parse(html, url)

        title = doc.meta("og:title") or doc.title
        if title and title.endswith(TITLE_SUFFIX):
            title = title[: -len(TITLE_SUFFIX)]

        channel_link = doc.select_one("link[itemprop='name']")
        channel = (doc.attr(channel_link, "content") if channel_link else None) or doc.meta("og:site_name")

        return MetadataCandidate(
            source=self.name,
            confidence=self.confidence,
            title=_clean(title, DEFAULT_VIDEO_TITLE),
            channel=_clean(channel, DEFAULT_VIDEO_CHANNEL),
            description=self._full_description(html) or _clean(doc.meta("og:description")),
        )

    @staticmethod
    def _full_description(html: str) -> Optional[str]:
        data = extract_embedded_json(html, "ytInitialData")
        contents = dig(data, "contents", "twoColumnWatchNextResults", "results", "results", "contents")
        if not isinstance(contents, list):
            return None

        for item in contents:
            info = dig(item, "videoSecondaryInfoRenderer")
            if not isinstance(info, dict):
                continue
            content = dig(info, "attributedDescription", "content")
            if isinstance(content, str) and content.strip():
                return content.strip()
            runs = dig(info, "description", "runs")
            if isinstance(runs, list):
                text = "".join(run.get("text", "") for run in runs if isinstance(run, dict))
                return text.strip() or None
        return None


def merge_candidates(candidates: Sequence[MetadataCandidate]) -> VideoMetadata:
    """
    Combine candidates, most trusted first.

    For each field the first non-default value wins, so a partial
    high-confidence answer is completed by lower-confidence sources.
    """
    merged = VideoMetadata()
    for candidate in sorted(candidates, key=lambda c: c.confidence, reverse=True):
        if merged.title == DEFAULT_VIDEO_TITLE and candidate.title:
            merged.title = candidate.title
        if merged.channel == DEFAULT_VIDEO_CHANNEL and candidate.channel:
            merged.channel = candidate.channel
        if not merged.description and candidate.description:
            merged.description = candidate.description
    return merged


class YouTubeMetadataResolver:
    """
    Resolves video title, channel and description.

    All providers run concurrently, each under its own timeout. A
    provider that fails is logged and ignored.

    Example:
        resolver = YouTubeMetadataResolver.default(http)
        metadata = await resolver.resolve("https://youtu.be/dQw4w9WgXcQ")
        if metadata is None:
            ...  # nothing known beyond the placeholders
    """

    def __init__(self, providers: Sequence[MetadataProvider]):
        self.providers = list(providers)

    @classmethod
    def default(
        cls,
        http: HttpClient,
        oembed_timeout: float = 5.0,
        watch_page_timeout: float = 8.0,
        concurrency: Optional[ConcurrencyManager] = None,
    ) -> YouTubeMetadataResolver:
        return cls(
            [
                OEmbedProvider(http, timeout=oembed_timeout),
                WatchPageProvider(http, timeout=watch_page_timeout, concurrency=concurrency),
            ]
        )

    async def _run(self, provider: MetadataProvider, url: str) -> Optional[MetadataCandidate]:
        try:
            return await provider.fetch(url)
        except FetchError as e:
            logger.warning(f"Metadata provider {provider.name} failed for {url}: {e.message}")
            return None

    async def resolve(self, url: str) -> Optional[VideoMetadata]:
        """
        Returns:
            Merged metadata, or None when both title and channel are
            still at their placeholder values
        """
        results = await asyncio.gather(*(self._run(provider, url) for provider in self.providers))
        candidates = [candidate for candidate in results if candidate is not None]

        metadata = merge_candidates(candidates)
        if metadata.title == DEFAULT_VIDEO_TITLE and metadata.channel == DEFAULT_VIDEO_CHANNEL:
            return None

        logger.debug(f"Resolved metadata for {url} from {[c.source for c in candidates]}")
        return metadata
