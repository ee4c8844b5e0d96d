"""Recognition of YouTube video URLs."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

YOUTUBE_DOMAINS = ("youtube.com", "youtube-nocookie.com")
SHORT_LINK_HOST = "youtu.be"
WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

_VIDEO_ID = re.compile(r"^[A-Za-z0-9_-]{6,}$")
_PATH_PREFIXES = ("shorts", "embed", "live", "v")


def _host(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def is_video_url(url: str) -> bool:
    """
    True for youtube.com (any subdomain), youtube-nocookie.com and youtu.be URLs.

    Example:
        >>> is_video_url("https://youtu.be/dQw4w9WgXcQ")
        True
        >>> is_video_url("https://notyoutube.com/watch?v=x")
        False
    """
    host = _host(url)
    if host == SHORT_LINK_HOST:
        return True
    return any(host == domain or host.endswith("." + domain) for domain in YOUTUBE_DOMAINS)


def extract_video_id(url: str) -> Optional[str]:
    """
    Pull the video id out of the common YouTube URL shapes.

    Handles ``watch?v=``, ``youtu.be/<id>``, ``/shorts/``, ``/embed/``,
    ``/live/`` and ``/v/``. Returns None for anything else.
    """
    if not is_video_url(url):
        return None
    try:
        parsed = urlparse(url)
    except ValueError:
        return None

    segments = [segment for segment in parsed.path.split("/") if segment]
    candidate: Optional[str] = None

    if (parsed.hostname or "").lower() == SHORT_LINK_HOST:
        candidate = segments[0] if segments else None
    elif segments[:1] == ["watch"]:
        candidate = (parse_qs(parsed.query).get("v") or [None])[0]
    elif len(segments) >= 2 and segments[0] in _PATH_PREFIXES:
        candidate = segments[1]

    if candidate and _VIDEO_ID.match(candidate):
        return candidate
    return None


def watch_url(video_id: str) -> str:
    return WATCH_URL.format(video_id=video_id)
