"""Distiller - the request orchestrator."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Any, Optional

from youtube_transcript_api import YouTubeTranscriptApi
from youtube_transcript_api.proxies import GenericProxyConfig

from ..concurrency.manager import ConcurrencyManager
from ..conversion.dom import html_to_text
from ..conversion.markdown import MarkdownSerializer
from ..conversion.readability import ArticleExtractor
from ..conversion.sanitizer import HtmlSanitizer
from ..conversion.structured import StructuredExtractor
from ..errors import DocumentNotFound, ValidationError
from ..http.client import AsyncHttpClient
from ..http.protocols import HttpClient
from ..models.config import DistillConfig
from ..models.document import Document, ExtractionRequest, RequestMode, TranscriptResult
from ..models.profiles import apply_profile
from ..pipeline.base import DistillPipeline, EventEmitter, RequestContext
from ..pipeline.steps import (
    ArticleStep,
    ConvertStep,
    FetchStep,
    ParseStep,
    PersistStep,
    StructuredStep,
    VideoStep,
)
from ..security.url_validator import UrlValidator
from ..storage import DocumentStore, create_store
from ..video.metadata import YouTubeMetadataResolver
from ..video.page import splice_transcript
from ..video.transcript import (
    NO_TRANSCRIPT_NOTE,
    TRANSCRIPT_ERROR_NOTE,
    TranscriptFetcher,
    render_note_html,
    render_transcript_html,
)
from ..video.urls import is_video_url

logger = logging.getLogger(__name__)


class Distiller:
    """
    Turns a URL into a normalized Markdown document.

    Generic pages go through fetch, sanitize/parse, structured extraction,
    readability and Markdown conversion. YouTube URLs go through metadata
    resolution and, in single-phase mode, transcript retrieval. Either
    way the assembled document is saved to the configured store.

    Example:
        async with Distiller(DistillConfig(profile=ProfileName.LOCAL)) as distiller:
            document = await distiller.process("https://example.com/post")
            print(document.markdown)

        # Two-phase video: metadata now, transcript later
        async with Distiller(DistillConfig(profile=ProfileName.HOSTED)) as distiller:
            document = await distiller.process("https://youtu.be/dQw4w9WgXcQ")
            if document.needs_transcript:
                result = await distiller.resolve_transcript(doc_id=document.id)
    """

    def __init__(
        self,
        config: Optional[DistillConfig] = None,
        *,
        http_client: Optional[HttpClient] = None,
        store: Optional[DocumentStore] = None,
        transcript_api: Optional[YouTubeTranscriptApi] = None,
    ):
        """
        Initialize the Distiller.

        Args:
            config: Configuration; profile defaults are applied
            http_client: Client to use instead of an owned AsyncHttpClient
            store: Store to use instead of the one selected by the config
            transcript_api: Caption client to use instead of one built from
                the network settings
        """
        self.config = apply_profile(config or DistillConfig())
        self._http: Optional[HttpClient] = http_client
        self._owned_http: Optional[AsyncHttpClient] = None
        self._store = store if store is not None else create_store(self.config.storage)
        self._transcript_api = transcript_api if transcript_api is not None else self._build_transcript_api()

        extraction = self.config.extraction
        self._validator = UrlValidator(block_private_ips=self.config.network.block_private_ips)
        self._concurrency = ConcurrencyManager(max_workers=self.config.performance.cpu_workers)
        self._serializer = MarkdownSerializer()
        self._sanitizer = HtmlSanitizer()
        self._structured = StructuredExtractor(
            max_links=extraction.max_links,
            max_references=extraction.max_references,
        )
        self._article = ArticleExtractor(
            char_threshold=extraction.char_threshold,
            min_content_length=extraction.min_content_length,
            n_top_candidates=extraction.n_top_candidates,
        )

        # Built in __aenter__, once the HTTP client exists
        self._transcripts: Optional[TranscriptFetcher] = None
        self._generic_pipeline: Optional[DistillPipeline] = None
        self._video_pipeline: Optional[DistillPipeline] = None

    @property
    def store(self) -> Optional[DocumentStore]:
        return self._store

    def _build_transcript_api(self) -> YouTubeTranscriptApi:
        proxy = self.config.network.proxy
        if proxy:
            return YouTubeTranscriptApi(proxy_config=GenericProxyConfig(http_url=proxy, https_url=proxy))
        return YouTubeTranscriptApi()

    async def __aenter__(self) -> Distiller:
        """Enter async context and initialize components."""
        if self._http is None:
            network = self.config.network
            self._owned_http = AsyncHttpClient(
                user_agent=network.user_agent,
                accept_language=network.accept_language,
                max_content_size=network.max_content_size,
                proxy=network.proxy,
                default_timeout=self.config.timeouts.fetch,
            )
            await self._owned_http.__aenter__()
            self._http = self._owned_http

        timeouts = self.config.timeouts
        resolver = YouTubeMetadataResolver.default(
            self._http,
            oembed_timeout=timeouts.oembed,
            watch_page_timeout=timeouts.watch_page,
            concurrency=self._concurrency,
        )
        self._transcripts = TranscriptFetcher(
            self._concurrency,
            languages=self.config.video.transcript_languages,
            api=self._transcript_api,
        )

        self._generic_pipeline = DistillPipeline(
            steps=[
                FetchStep(self._http),
                ParseStep(self._sanitizer, self._concurrency),
                StructuredStep(self._structured, self._concurrency),
                ArticleStep(self._article, self._concurrency),
                ConvertStep(self._serializer, self._concurrency),
                PersistStep(self._store),
            ]
        )
        self._video_pipeline = DistillPipeline(
            steps=[
                VideoStep(resolver, self._transcripts),
                ConvertStep(self._serializer, self._concurrency),
                PersistStep(self._store),
            ]
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and cleanup resources."""
        if self._owned_http is not None:
            await self._owned_http.__aexit__(exc_type, exc_val, exc_tb)
            self._owned_http = None
            self._http = None

        self._concurrency.shutdown(wait=True)

        close = getattr(self._store, "close", None)
        if callable(close):
            close()

    def build_request(
        self,
        url: str,
        two_phase: Optional[bool] = None,
        owner: Optional[str] = None,
    ) -> ExtractionRequest:
        """
        Validate ``url`` and pick the processing mode.

        Raises:
            ValidationError: The URL is missing, relative or blocked
        """
        source_url = self._validator.ensure_valid(url)
        mode = RequestMode.VIDEO if is_video_url(source_url) else RequestMode.GENERIC
        return ExtractionRequest(
            source_url=source_url,
            mode=mode,
            timeouts=self.config.timeouts,
            two_phase=self.config.video.two_phase if two_phase is None else two_phase,
            owner=owner,
        )

    async def process(
        self,
        url: str,
        two_phase: Optional[bool] = None,
        owner: Optional[str] = None,
        emit: Optional[EventEmitter] = None,
    ) -> Document:
        """
        Distill ``url`` into a Document.

        Args:
            url: Absolute http(s) URL
            two_phase: Override the configured video mode for this request
            owner: Opaque identity stored with the document
            emit: Optional callback receiving PipelineEvents

        Returns:
            The assembled document; ``needs_transcript`` is set for
            two-phase videos

        Raises:
            ValidationError: Bad URL
            FetchError: The page could not be downloaded
            ExtractionFailed: No article could be isolated
            DistillError: Unexpected failure (status 500)
        """
        if self._generic_pipeline is None or self._video_pipeline is None:
            raise RuntimeError("Distiller not initialized. Use 'async with' context manager.")

        request = self.build_request(url, two_phase=two_phase, owner=owner)
        logger.info(f"Processing {request.source_url} ({request.mode.value})")

        pipeline = self._video_pipeline if request.mode == RequestMode.VIDEO else self._generic_pipeline
        ctx = await pipeline.execute(RequestContext(request=request), emit)

        if ctx.error is not None:
            raise ctx.error
        if ctx.document is None:
            raise RuntimeError(f"Pipeline finished without a document for {request.source_url}")
        logger.info(f"Distilled {request.source_url}: {ctx.document.word_count} words")
        return ctx.document

    async def resolve_transcript(
        self,
        doc_id: Optional[str] = None,
        url: Optional[str] = None,
    ) -> TranscriptResult:
        """
        Second phase of a two-phase video.

        With ``doc_id``, fetch the transcript of the stored document,
        splice it in place of the placeholder (or an error note when it
        can't be fetched), re-serialize and save. With only ``url``,
        return a standalone transcript fragment without touching the store.

        Raises:
            ValidationError: Neither argument given, a bad URL, or a document
                that is not awaiting a transcript
            DocumentNotFound: No stored document has ``doc_id``
            PersistenceError: The store failed to load or update
        """
        if self._transcripts is None:
            raise RuntimeError("Distiller not initialized. Use 'async with' context manager.")

        timeout = self.config.timeouts.transcript_continuation

        if doc_id is None:
            if url is None:
                raise ValidationError("Missing docId or url")
            source_url = self._validator.ensure_valid(url)
            segments = await self._transcripts.fetch(source_url, timeout)
            if segments:
                section = render_transcript_html(segments)
            else:
                section = render_note_html("Note", NO_TRANSCRIPT_NOTE)
            fragment = await self._concurrency.run_cpu_bound(self._serializer.serialize, section)
            return TranscriptResult(success=True, transcript=fragment)

        document = await self._load(doc_id)
        if not document.needs_transcript or not is_video_url(document.source_url):
            raise ValidationError(f"Document is not awaiting a transcript: {doc_id}")

        segments = await self._transcripts.fetch(document.source_url, timeout)
        if segments:
            section = render_transcript_html(segments)
        else:
            section = render_note_html("Error", TRANSCRIPT_ERROR_NOTE)

        content_html = splice_transcript(document.content_html, section)
        markdown = await self._concurrency.run_cpu_bound(self._serializer.serialize, content_html)
        if self._store is None:
            raise RuntimeError("No document store configured")
        await self._store.update(
            doc_id,
            content_html=content_html,
            markdown=markdown,
            plain_text=html_to_text(content_html),
            needs_transcript=False,
        )
        logger.info(f"Resolved transcript for document {doc_id} ({len(segments or [])} segments)")
        return TranscriptResult(success=True, markdown=markdown)

    async def count_documents(self, owner: Optional[str] = None) -> int:
        """Number of stored documents, or 0 when no store is configured."""
        if self._store is None:
            return 0
        return await self._store.count(owner)

    async def _load(self, doc_id: str) -> Document:
        document = await self._store.find_by_id(doc_id) if self._store is not None else None
        if document is None:
            raise DocumentNotFound(f"Document not found: {doc_id}")
        return document


def distill_blocking(url: str, config: Optional[DistillConfig] = None, **kwargs: Any) -> Document:
    """
    Blocking wrapper around :meth:`Distiller.process`.

    WARNING: Do not call from within an existing event loop (e.g., Jupyter,
    asyncio-based frameworks). Use the async Distiller API instead.

    Args:
        url: The URL to distill
        config: Optional configuration
        **kwargs: Passed to :meth:`Distiller.process` (two_phase, owner, emit)

    Returns:
        The distilled document
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        raise RuntimeError(
            "distill_blocking() called from async context. Use 'async with Distiller()' instead."
        )

    async def _run() -> Document:
        async with Distiller(config) as distiller:
            return await distiller.process(url, **kwargs)

    return asyncio.run(_run())
