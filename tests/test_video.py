"""Tests for YouTube metadata and transcripts."""

import asyncio
import json
import time
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
import requests
from webdistill.concurrency import ConcurrencyManager
from webdistill.errors import FetchHTTPError, FetchTimeout, TranscriptUnavailable
from webdistill.models.document import TranscriptSegment, VideoMetadata
from webdistill.video import (
    TRANSCRIPT_PLACEHOLDER_HTML,
    MetadataCandidate,
    OEmbedProvider,
    TranscriptFetcher,
    WatchPageProvider,
    YouTubeMetadataResolver,
    extract_video_id,
    format_timestamp,
    is_video_url,
    merge_candidates,
    render_transcript_html,
    render_video_html,
    splice_transcript,
)
from webdistill.video.embedded import dig, extract_embedded_json
from youtube_transcript_api import NoTranscriptFound, TranscriptsDisabled, VideoUnavailable

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


class FakeTranscript:
    """Stands in for a youtube-transcript-api Transcript."""

    def __init__(self, language_code, lines, is_generated=False):
        self.language_code = language_code
        self.is_generated = is_generated
        self.lines = lines

    def fetch(self):
        return [SimpleNamespace(text=text, start=start, duration=duration) for start, duration, text in self.lines]


class FakeTranscriptList:
    def __init__(self, video_id, transcripts):
        self.video_id = video_id
        self.transcripts = transcripts

    def _find(self, language_codes, generated):
        for code in language_codes:
            for transcript in self.transcripts:
                if transcript.language_code == code and transcript.is_generated == generated:
                    return transcript
        raise NoTranscriptFound(self.video_id, language_codes, "[]")

    def find_manually_created_transcript(self, language_codes):
        return self._find(language_codes, generated=False)

    def find_generated_transcript(self, language_codes):
        return self._find(language_codes, generated=True)

    def __iter__(self):
        return iter(self.transcripts)


class FakeTranscriptApi:
    """Stands in for YouTubeTranscriptApi without touching the network."""

    def __init__(self, transcripts=(), error=None, delay=0.0):
        self.transcripts = list(transcripts)
        self.error = error
        self.delay = delay
        self.requested = []

    def list(self, video_id):
        self.requested.append(video_id)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return FakeTranscriptList(video_id, self.transcripts)


class TestVideoUrls:
    """Tests for video URL recognition."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://youtube.com/shorts/dQw4w9WgXcQ",
            "https://m.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://www.youtube-nocookie.com/embed/dQw4w9WgXcQ",
        ],
    )
    def test_video_urls(self, url):
        """Test that YouTube hosts are recognized."""
        assert is_video_url(url)
        assert extract_video_id(url) == "dQw4w9WgXcQ"

    @pytest.mark.parametrize(
        "url",
        [
            "https://notyoutube.com/watch?v=dQw4w9WgXcQ",
            "https://youtube.com.evil.example/watch?v=dQw4w9WgXcQ",
            "https://example.com/youtube.com",
            "not a url",
        ],
    )
    def test_non_video_urls(self, url):
        """Test that lookalike hosts are rejected."""
        assert not is_video_url(url)
        assert extract_video_id(url) is None

    def test_video_url_without_id(self):
        """Test that a channel page is a video host without a video id."""
        assert is_video_url("https://www.youtube.com/@somechannel")
        assert extract_video_id("https://www.youtube.com/@somechannel") is None
        assert extract_video_id("https://www.youtube.com/watch?v=<bad>") is None


class TestEmbeddedJson:
    """Tests for inline JSON extraction."""

    def test_var_assignment(self):
        """Test decoding of a var assignment followed by more script."""
        html = 'var ytInitialData = {"a": {"b": [1, {"c": "};"}]}}; var other = 1;'
        data = extract_embedded_json(html, "ytInitialData")
        assert data == {"a": {"b": [1, {"c": "};"}]}}
        assert dig(data, "a", "b", 1, "c") == "};"

    def test_window_assignment(self):
        """Test decoding of a window[...] assignment."""
        html = 'window["ytInitialData"] = {"x": 1};'
        assert extract_embedded_json(html, "ytInitialData") == {"x": 1}

    def test_missing_or_malformed(self):
        """Test that missing and broken blobs return None."""
        assert extract_embedded_json("<html></html>", "ytInitialData") is None
        assert extract_embedded_json("var ytInitialData = {broken;", "ytInitialData") is None

    def test_dig_misses(self):
        """Test that dig returns None instead of raising."""
        assert dig(None, "a") is None
        assert dig({"a": [1]}, "a", 5) is None
        assert dig({"a": "text"}, "a", "b") is None
        assert dig({"a": [1]}, "a", "b") is None


class TestTranscriptRendering:
    """Tests for transcript formatting."""

    @pytest.mark.parametrize(
        "offset_ms,expected",
        [(125000, "2:05"), (3000, "0:03"), (3600000, "60:00"), (999, "0:00"), (-5, "0:00")],
    )
    def test_format_timestamp(self, offset_ms, expected):
        """Test M:SS formatting without hour wrapping."""
        assert format_timestamp(offset_ms) == expected

    def test_render_transcript_html(self):
        """Test heading and timestamped paragraphs."""
        html = render_transcript_html(
            [TranscriptSegment(offset_ms=125000, text="Tom & Jerry <live>")]
        )
        assert html == "<h2>Transcript</h2>\n<p><strong>2:05</strong> - Tom &amp; Jerry &lt;live&gt;</p>"


class TestTranscriptFetcher:
    """Tests for TranscriptFetcher."""

    def make_fetcher(self, api, languages=("en",)):
        return TranscriptFetcher(ConcurrencyManager(max_workers=1), languages=languages, api=api)

    def test_choose_prefers_manual(self):
        """Test that a manual transcript beats an auto-generated one."""
        api = FakeTranscriptApi()
        transcripts = FakeTranscriptList(
            "dQw4w9WgXcQ",
            [
                FakeTranscript("en", [], is_generated=True),
                FakeTranscript("de", []),
                FakeTranscript("en", []),
            ],
        )

        chosen = self.make_fetcher(api).choose_transcript(transcripts)

        assert chosen.language_code == "en"
        assert not chosen.is_generated

    def test_choose_language_order_and_fallback(self):
        """Test preferred languages, then generated, then the first listed."""
        fetcher = self.make_fetcher(FakeTranscriptApi(), languages=("fr", "en"))

        both = FakeTranscriptList("id", [FakeTranscript("en", []), FakeTranscript("fr", [])])
        assert fetcher.choose_transcript(both).language_code == "fr"

        generated = FakeTranscriptList("id", [FakeTranscript("ja", []), FakeTranscript("en", [], is_generated=True)])
        assert fetcher.choose_transcript(generated).language_code == "en"

        foreign = FakeTranscriptList("id", [FakeTranscript("ja", []), FakeTranscript("ko", [])])
        assert fetcher.choose_transcript(foreign).language_code == "ja"

        with pytest.raises(TranscriptUnavailable):
            fetcher.choose_transcript(FakeTranscriptList("id", []))

    @pytest.mark.asyncio
    async def test_fetch_success(self):
        """Test segment conversion from the library's snippets."""
        api = FakeTranscriptApi(
            [FakeTranscript("en", [(0.0, 2.5, "Hello & welcome"), (125.2, 3.0, "to the\n  show"), (130.0, 1.0, " ")])]
        )

        segments = await self.make_fetcher(api).fetch("https://youtu.be/dQw4w9WgXcQ", timeout=5.0)

        assert segments == [
            TranscriptSegment(offset_ms=0, text="Hello & welcome", duration_ms=2500),
            TranscriptSegment(offset_ms=125200, text="to the show", duration_ms=3000),
        ]
        assert api.requested == ["dQw4w9WgXcQ"]

    @pytest.mark.asyncio
    async def test_fetch_no_captions(self):
        """Test that disabled, missing or empty captions yield None."""
        disabled = FakeTranscriptApi(error=TranscriptsDisabled("dQw4w9WgXcQ"))
        assert await self.make_fetcher(disabled).fetch(VIDEO_URL, timeout=5.0) is None

        assert await self.make_fetcher(FakeTranscriptApi()).fetch(VIDEO_URL, timeout=5.0) is None

        empty = FakeTranscriptApi([FakeTranscript("en", [(0.0, 1.0, "")])])
        assert await self.make_fetcher(empty).fetch(VIDEO_URL, timeout=5.0) is None

    @pytest.mark.asyncio
    async def test_fetch_timeout(self):
        """Test that a slow caption source yields None within the budget."""
        api = FakeTranscriptApi([FakeTranscript("en", [(0.0, 1.0, "late")])], delay=0.5)
        loop = asyncio.get_running_loop()

        started = loop.time()
        assert await self.make_fetcher(api).fetch(VIDEO_URL, timeout=0.05) is None
        assert loop.time() - started < 0.4

    @pytest.mark.asyncio
    async def test_fetch_request_errors(self):
        """Test that library and transport failures yield None."""
        unavailable = FakeTranscriptApi(error=VideoUnavailable("dQw4w9WgXcQ"))
        assert await self.make_fetcher(unavailable).fetch(VIDEO_URL, timeout=5.0) is None

        offline = FakeTranscriptApi(error=requests.ConnectionError("connection reset"))
        assert await self.make_fetcher(offline).fetch(VIDEO_URL, timeout=5.0) is None

    @pytest.mark.asyncio
    async def test_fetch_non_video_url(self):
        """Test that a non-video URL never reaches the caption service."""
        api = FakeTranscriptApi()

        assert await self.make_fetcher(api).fetch("https://example.com/watch", timeout=5.0) is None
        assert api.requested == []


class TestMetadataProviders:
    """Tests for the metadata providers."""

    @pytest.mark.asyncio
    async def test_oembed_encodes_url(self):
        """Test that the video URL is percent-encoded into the endpoint."""
        http = AsyncMock()
        http.get_json.return_value = {"title": " Never Gonna ", "author_name": "Rick Astley"}

        candidate = await OEmbedProvider(http, timeout=5.0).fetch(VIDEO_URL)

        http.get_json.assert_awaited_once_with(
            "https://www.youtube.com/oembed?url=https%3A%2F%2Fwww.youtube.com%2Fwatch%3Fv%3DdQw4w9WgXcQ&format=json",
            timeout=5.0,
        )
        assert candidate.title == "Never Gonna"
        assert candidate.channel == "Rick Astley"
        assert candidate.description is None

    def test_watch_page_rich_description(self):
        """Test that the ytInitialData description beats og:description."""
        initial = {
            "contents": {
                "twoColumnWatchNextResults": {
                    "results": {
                        "results": {
                            "contents": [
                                {"videoPrimaryInfoRenderer": {}},
                                {"videoSecondaryInfoRenderer": {"attributedDescription": {"content": "Line one\nLine two"}}},
                            ]
                        }
                    }
                }
            }
        }
        html = f"""<html><head>
            <meta property="og:title" content="Never Gonna Give You Up">
            <meta property="og:description" content="Line one...">
        </head><body>
            <span itemprop="author"><link itemprop="name" content="Rick Astley"></span>
            <script>var ytInitialData = {json.dumps(initial)};</script>
        </body></html>"""

        candidate = WatchPageProvider(AsyncMock()).parse(html, VIDEO_URL)

        assert candidate.title == "Never Gonna Give You Up"
        assert candidate.channel == "Rick Astley"
        assert candidate.description == "Line one\nLine two"

    def test_watch_page_malformed_blob(self):
        """Test fallback to OpenGraph when the inline blob is broken."""
        html = """<html><head>
            <title>Some Video - YouTube</title>
            <meta property="og:description" content="Short description">
        </head><body><script>var ytInitialData = {"contents": broken};</script></body></html>"""

        candidate = WatchPageProvider(AsyncMock()).parse(html, VIDEO_URL)

        assert candidate.title == "Some Video"
        assert candidate.channel is None
        assert candidate.description == "Short description"

    @pytest.mark.asyncio
    async def test_watch_page_fetches_canonical_url(self):
        """Test that short links are fetched through the watch URL."""
        http = AsyncMock()
        http.get_text.return_value = ('<meta property="og:title" content="T">', VIDEO_URL)

        candidate = await WatchPageProvider(http, timeout=8.0).fetch("https://youtu.be/dQw4w9WgXcQ")

        http.get_text.assert_awaited_once_with(VIDEO_URL, timeout=8.0)
        assert candidate.title == "T"


class FakeProvider:
    def __init__(self, name, confidence, candidate=None, error=None):
        self.name = name
        self.confidence = confidence
        self._candidate = candidate
        self._error = error

    async def fetch(self, url):
        if self._error is not None:
            raise self._error
        return self._candidate


class TestMetadataResolver:
    """Tests for merging and resolving metadata."""

    def test_merge_prefers_confident_sources(self):
        """Test that each field comes from the most trusted source that has it."""
        merged = merge_candidates(
            [
                MetadataCandidate("watch_page", 0.6, title="Page title", channel="Page channel", description="Desc"),
                MetadataCandidate("oembed", 1.0, title="Exact title"),
            ]
        )
        assert merged == VideoMetadata(title="Exact title", channel="Page channel", description="Desc")

    def test_merge_nothing(self):
        """Test that no candidates leaves the placeholders."""
        assert merge_candidates([]) == VideoMetadata()

    @pytest.mark.asyncio
    async def test_partial_failure(self):
        """Test that one failing provider does not lose the other's answer."""
        resolver = YouTubeMetadataResolver(
            [
                FakeProvider("oembed", 1.0, error=FetchHTTPError(401, url=VIDEO_URL)),
                FakeProvider("watch_page", 0.6, MetadataCandidate("watch_page", 0.6, title="Only title")),
            ]
        )

        metadata = await resolver.resolve(VIDEO_URL)

        assert metadata == VideoMetadata(title="Only title", channel="YouTube", description="")

    @pytest.mark.asyncio
    async def test_all_failing(self):
        """Test that no usable source resolves to None."""
        resolver = YouTubeMetadataResolver(
            [
                FakeProvider("oembed", 1.0, error=FetchTimeout("slow", url=VIDEO_URL)),
                FakeProvider("watch_page", 0.6, MetadataCandidate("watch_page", 0.6)),
            ]
        )

        assert await resolver.resolve(VIDEO_URL) is None


class TestVideoPage:
    """Tests for the video document body."""

    def test_render_video_html(self):
        """Test title, attribution, quoted description and section order."""
        metadata = VideoMetadata(title="A & B", channel="Chan", description="First\n\n  Second  ")

        html = render_video_html(VIDEO_URL, metadata, TRANSCRIPT_PLACEHOLDER_HTML)

        assert html.startswith("<h1>A &amp; B</h1>")
        assert "<strong>Channel:</strong> Chan" in html
        assert f'<a href="{VIDEO_URL}">YouTube</a>' in html
        assert "<blockquote><p>First</p><p>Second</p></blockquote>" in html
        assert html.endswith(TRANSCRIPT_PLACEHOLDER_HTML)

    def test_render_without_description(self):
        """Test that an empty description adds no quote."""
        html = render_video_html(VIDEO_URL, VideoMetadata(), "<p>x</p>")
        assert "<blockquote>" not in html
        assert "<h1>Unknown Title</h1>" in html

    def test_splice_replaces_placeholder(self):
        """Test that the transcript lands where the placeholder was."""
        body = f"<h1>T</h1>\n{TRANSCRIPT_PLACEHOLDER_HTML}\n<p>after</p>"

        spliced = splice_transcript(body, "<h2>Transcript</h2>")

        assert spliced == "<h1>T</h1>\n<h2>Transcript</h2>\n<p>after</p>"

    def test_splice_appends_without_placeholder(self):
        """Test that documents without the placeholder get the section appended."""
        assert splice_transcript("<h1>T</h1>", "<h2>Transcript</h2>") == "<h1>T</h1>\n<h2>Transcript</h2>"
