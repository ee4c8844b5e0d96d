"""YouTube metadata and transcripts."""

from .metadata import (
    MetadataCandidate,
    MetadataProvider,
    OEmbedProvider,
    WatchPageProvider,
    YouTubeMetadataResolver,
    merge_candidates,
)
from .transcript import (
    NO_TRANSCRIPT_NOTE,
    TRANSCRIPT_ERROR_NOTE,
    TranscriptFetcher,
    format_timestamp,
    render_transcript_html,
)
from .page import TRANSCRIPT_PLACEHOLDER_HTML, render_video_html, splice_transcript
from .urls import extract_video_id, is_video_url, watch_url

__all__ = [
    "MetadataCandidate",
    "MetadataProvider",
    "NO_TRANSCRIPT_NOTE",
    "OEmbedProvider",
    "TRANSCRIPT_ERROR_NOTE",
    "TRANSCRIPT_PLACEHOLDER_HTML",
    "TranscriptFetcher",
    "WatchPageProvider",
    "YouTubeMetadataResolver",
    "extract_video_id",
    "format_timestamp",
    "is_video_url",
    "merge_candidates",
    "render_transcript_html",
    "render_video_html",
    "splice_transcript",
    "watch_url",
]
