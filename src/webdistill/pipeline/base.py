"""Base classes for the distillation pipeline."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, runtime_checkable

from ..conversion.dom import ParsedDocument
from ..errors import DistillError
from ..models.document import Article, Document, ExtractionRequest, RawPage, StructuredMeta, VideoMetadata
from ..models.events import EventType, PipelineEvent, RequestState

logger = logging.getLogger(__name__)

# Type alias for event emitter function
EventEmitter = Callable[[PipelineEvent], None]


@dataclass
class RequestContext:
    """
    State of one request as it moves through the pipeline.

    Owned by a single request; steps fill it in order and nothing in it
    is shared with another request.

    Attributes:
        request: The validated request
        state: Current lifecycle state
        raw: Fetched page, dropped once the structured pass has read it
        doc: Sanitized, parsed page
        structured: Headings, links, images, encyclopedia facts
        article: Readability result
        video: Resolved video metadata
        content_html: Body of the final document
        markdown: Serialized ``content_html``
        document: The assembled (and possibly persisted) result
        error: The failure that stopped the pipeline
    """

    request: ExtractionRequest
    state: RequestState = RequestState.PENDING

    raw: Optional[RawPage] = None
    doc: Optional[ParsedDocument] = None
    structured: Optional[StructuredMeta] = None
    article: Optional[Article] = None
    video: Optional[VideoMetadata] = None

    title: str = ""
    site_name: str = ""
    content_html: str = ""
    plain_text: str = ""
    markdown: Optional[str] = None
    needs_transcript: bool = False

    document: Optional[Document] = None
    error: Optional[DistillError] = None

    @property
    def url(self) -> str:
        return self.request.source_url

    def transition(self, state: RequestState, emit: Optional[EventEmitter] = None) -> None:
        """Move to ``state`` and report it."""
        self.state = state
        notify(
            emit,
            PipelineEvent(type=EventType.STATE_CHANGED, url=self.url, state=state),
        )


def notify(emit: Optional[EventEmitter], event: PipelineEvent) -> None:
    if emit is not None:
        emit(event)


@runtime_checkable
class PipelineStep(Protocol):
    """
    Protocol for pipeline steps.

    Each step receives a RequestContext, processes it, and returns
    the (possibly modified) context.

    Error Handling Contract:
    - Critical failures raise a ``DistillError`` subclass
    - Auxiliary failures are logged and degrade into the context
    - The pipeline records the raised error on ``ctx.error`` and stops
    """

    name: str

    async def execute(
        self,
        ctx: RequestContext,
        emit: Optional[EventEmitter] = None,
    ) -> RequestContext:
        """
        Execute this pipeline step.

        Args:
            ctx: The request context with accumulated state
            emit: Optional callback to emit events

        Returns:
            The (possibly modified) request context
        """
        ...


@dataclass
class DistillPipeline:
    """
    Runs a request through its steps in order.

    If a step raises, the error is captured in ``ctx.error``, the state
    becomes FAILED and processing stops. Errors outside the
    ``DistillError`` hierarchy are logged with their traceback and
    recorded as an opaque internal error.

    Example:
        pipeline = DistillPipeline(steps=[
            FetchStep(http_client),
            ParseStep(sanitizer, concurrency),
            StructuredStep(structured_extractor, concurrency),
            ArticleStep(article_extractor, concurrency),
            ConvertStep(serializer, concurrency),
            PersistStep(store),
        ])

        ctx = await pipeline.execute(RequestContext(request), emit=log_event)
        if ctx.error:
            logger.error(f"Failed: {ctx.error.message}")
    """

    steps: list[PipelineStep]

    async def execute(
        self,
        ctx: RequestContext,
        emit: Optional[EventEmitter] = None,
    ) -> RequestContext:
        for step in self.steps:
            try:
                ctx = await step.execute(ctx, emit)
            except DistillError as e:
                logger.error(f"{step.name} failed for {ctx.url}: {e.message}")
                ctx.error = e
            except Exception:
                logger.exception(f"Unexpected error in {step.name} for {ctx.url}")
                ctx.error = DistillError("Internal Server Error")

            if ctx.error is not None:
                ctx.transition(RequestState.FAILED, emit)
                notify(
                    emit,
                    PipelineEvent(
                        type=EventType.FETCH_FAILED,
                        url=ctx.url,
                        error=ctx.error.message,
                        status_code=ctx.error.status_code,
                    ),
                )
                break

        return ctx
