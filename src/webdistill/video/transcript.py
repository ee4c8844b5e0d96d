"""YouTube caption retrieval and rendering."""

from __future__ import annotations

import asyncio
import html
import logging
from typing import Any, Optional, Sequence

import requests
from youtube_transcript_api import (
    CouldNotRetrieveTranscript,
    NoTranscriptFound,
    TranscriptsDisabled,
    YouTubeTranscriptApi,
)

from ..concurrency.manager import ConcurrencyManager
from ..conversion.dom import normalize_space
from ..errors import TranscriptUnavailable
from ..models.document import TranscriptSegment
from .urls import extract_video_id

logger = logging.getLogger(__name__)

TRANSCRIPT_HEADING = "Transcript"
NO_TRANSCRIPT_NOTE = "No transcript available (captions may be disabled for this video)"
TRANSCRIPT_ERROR_NOTE = "Could not fetch transcript (captions might be disabled)"


def format_timestamp(offset_ms: int) -> str:
    """
    Render a caption offset as ``M:SS``.

    Minutes are not wrapped into hours.

    Example:
        >>> format_timestamp(125000)
        '2:05'
        >>> format_timestamp(3000)
        '0:03'
    """
    offset_ms = max(int(offset_ms), 0)
    minutes = offset_ms // 60000
    seconds = (offset_ms // 1000) % 60
    return f"{minutes}:{seconds:02d}"


def render_transcript_html(segments: Sequence[TranscriptSegment]) -> str:
    """Transcript section: a heading and one timestamped paragraph per segment."""
    parts = [f"<h2>{TRANSCRIPT_HEADING}</h2>"]
    for segment in segments:
        timestamp = format_timestamp(segment.offset_ms)
        parts.append(f"<p><strong>{timestamp}</strong> - {html.escape(segment.text, quote=False)}</p>")
    return "\n".join(parts)


def render_note_html(label: str, note: str) -> str:
    return f"<p><strong>{label}:</strong> {html.escape(note, quote=False)}</p>"


class TranscriptFetcher:
    """
    Fetches the captions of a YouTube video with youtube-transcript-api.

    A manual transcript in a preferred language beats an auto-generated
    one, and the first listed transcript is the last resort. The library
    is synchronous, so each lookup runs in the thread pool.

    Failures never escape :meth:`fetch`; callers get None and render a
    note instead.

    Example:
        fetcher = TranscriptFetcher(concurrency)
        segments = await fetcher.fetch("https://youtu.be/dQw4w9WgXcQ", timeout=5.0)
    """

    def __init__(
        self,
        concurrency: ConcurrencyManager,
        languages: Sequence[str] = ("en",),
        api: Optional[YouTubeTranscriptApi] = None,
    ):
        self._concurrency = concurrency
        self._api = api if api is not None else YouTubeTranscriptApi()
        self.languages = list(languages)

    async def fetch(self, url: str, timeout: float) -> Optional[list[TranscriptSegment]]:
        """
        Retrieve the transcript of ``url`` within ``timeout`` seconds.

        Returns:
            Ordered segments, or None on timeout, network errors, or when
            the video has no captions
        """
        video_id = extract_video_id(url)
        if video_id is None:
            logger.warning(f"Transcript unavailable for {url}: not a YouTube video URL")
            return None

        try:
            return await asyncio.wait_for(
                self._concurrency.run_cpu_bound(self.retrieve, video_id),
                timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Transcript fetch timed out after {timeout:.0f}s for {url}")
        except TranscriptUnavailable as e:
            logger.warning(f"Transcript unavailable for {url}: {e.message}")
        except (TranscriptsDisabled, NoTranscriptFound):
            logger.warning(f"Transcript unavailable for {url}: captions are disabled or missing")
        except CouldNotRetrieveTranscript as e:
            logger.warning(f"Transcript unavailable for {url}: {type(e).__name__}")
        except requests.RequestException as e:
            logger.warning(f"Transcript request failed for {url}: {e}")
        return None

    def retrieve(self, video_id: str) -> list[TranscriptSegment]:
        """
        Blocking lookup of the best transcript for ``video_id``.

        Raises:
            TranscriptUnavailable: The video lists no transcripts, or the
                chosen one is empty
            CouldNotRetrieveTranscript: The library refused the video
        """
        transcript = self.choose_transcript(self._api.list(video_id))
        segments = []
        for snippet in transcript.fetch():
            text = normalize_space(snippet.text)
            if text:
                segments.append(
                    TranscriptSegment(
                        offset_ms=int(round(snippet.start * 1000)),
                        text=text,
                        duration_ms=int(round(snippet.duration * 1000)),
                    )
                )
        if not segments:
            raise TranscriptUnavailable("Transcript is empty")

        logger.debug(f"Fetched {len(segments)} caption segments for {video_id} ({transcript.language_code})")
        return segments

    def choose_transcript(self, transcripts: Any) -> Any:
        """Pick a transcript: manual before generated, in preferred-language order."""
        try:
            return transcripts.find_manually_created_transcript(self.languages)
        except NoTranscriptFound:
            pass
        try:
            return transcripts.find_generated_transcript(self.languages)
        except NoTranscriptFound:
            pass
        for transcript in transcripts:
            return transcript
        raise TranscriptUnavailable("No caption tracks (captions may be disabled)")
