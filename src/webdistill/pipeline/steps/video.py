"""VideoStep - YouTube metadata, transcript and body assembly."""

import asyncio
import logging
from typing import Optional

from ...conversion.dom import html_to_text
from ...errors import MetadataUnavailable
from ...models.document import TranscriptSegment, VideoMetadata
from ...models.events import EventType, PipelineEvent, RequestState
from ...video.metadata import YouTubeMetadataResolver
from ...video.page import TRANSCRIPT_PLACEHOLDER_HTML, render_video_html
from ...video.transcript import (
    NO_TRANSCRIPT_NOTE,
    TranscriptFetcher,
    render_note_html,
    render_transcript_html,
)
from ..base import EventEmitter, RequestContext, notify

logger = logging.getLogger(__name__)


class VideoStep:
    """
    Builds the body of a video document as HTML.

    Single phase: metadata and transcript are gathered concurrently and
    a missing transcript becomes a note. Two phase: only metadata is
    resolved and the transcript placeholder marks the document as
    needing a follow-up call.

    Metadata never fails the request; when every source fails the
    placeholder title and channel are used.
    """

    name = "video"

    def __init__(self, resolver: YouTubeMetadataResolver, transcripts: TranscriptFetcher) -> None:
        self._resolver = resolver
        self._transcripts = transcripts

    async def _resolve(
        self, ctx: RequestContext
    ) -> tuple[Optional[VideoMetadata], Optional[list[TranscriptSegment]]]:
        if ctx.request.two_phase:
            return await self._resolver.resolve(ctx.url), None
        metadata, segments = await asyncio.gather(
            self._resolver.resolve(ctx.url),
            self._transcripts.fetch(ctx.url, ctx.request.timeouts.transcript),
        )
        return metadata, segments

    async def execute(
        self,
        ctx: RequestContext,
        emit: Optional[EventEmitter] = None,
    ) -> RequestContext:
        url = ctx.url
        ctx.transition(RequestState.RESOLVING_VIDEO_METADATA, emit)

        metadata, segments = await self._resolve(ctx)

        if metadata is None:
            error = MetadataUnavailable(f"No metadata source answered for {url}")
            logger.warning(f"Using placeholder title and channel: {error.message}")
            metadata = VideoMetadata()
        else:
            notify(emit, PipelineEvent(type=EventType.METADATA_RESOLVED, url=url, message=metadata.title))

        if ctx.request.two_phase:
            section = TRANSCRIPT_PLACEHOLDER_HTML
            ctx.needs_transcript = True
        elif segments:
            section = render_transcript_html(segments)
            notify(
                emit,
                PipelineEvent(
                    type=EventType.TRANSCRIPT_RESOLVED,
                    url=url,
                    message=f"{len(segments)} segments",
                ),
            )
        else:
            section = render_note_html("Note", NO_TRANSCRIPT_NOTE)
            notify(emit, PipelineEvent(type=EventType.TRANSCRIPT_MISSING, url=url))

        ctx.video = metadata
        ctx.title = metadata.title
        ctx.site_name = metadata.channel
        ctx.content_html = render_video_html(url, metadata, section)
        ctx.plain_text = html_to_text(ctx.content_html)
        return ctx
