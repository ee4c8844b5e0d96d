"""HTML body of a video document."""

from __future__ import annotations

import html

from ..models.document import VideoMetadata

TRANSCRIPT_PLACEHOLDER_HTML = "<p><em>Fetching transcript...</em></p>"


def render_video_html(url: str, metadata: VideoMetadata, section_html: str) -> str:
    """
    Title, attribution line, description quote, then ``section_html``.

    ``section_html`` is the transcript, a note, or the two-phase
    placeholder.
    """
    parts = [
        f"<h1>{html.escape(metadata.title, quote=False)}</h1>",
        (
            f"<p><strong>Channel:</strong> {html.escape(metadata.channel, quote=False)}"
            f' | <strong>Source:</strong> <a href="{html.escape(url)}">YouTube</a></p>'
        ),
    ]
    lines = [line.strip() for line in metadata.description.splitlines() if line.strip()]
    if lines:
        quoted = "".join(f"<p>{html.escape(line, quote=False)}</p>" for line in lines)
        parts.append(f"<blockquote>{quoted}</blockquote>")
    parts.append(section_html)
    return "\n".join(parts)


def splice_transcript(content_html: str, section_html: str) -> str:
    """
    Put ``section_html`` where the placeholder is, or append it.

    Matching is a literal substring search so documents stored by older
    builds, or edited since, still receive their transcript.
    """
    if TRANSCRIPT_PLACEHOLDER_HTML in content_html:
        return content_html.replace(TRANSCRIPT_PLACEHOLDER_HTML, section_html, 1)
    return f"{content_html}\n{section_html}"
