"""StructuredStep - headings, links, images and encyclopedia facts."""

import logging
from typing import Optional

from ...concurrency.manager import ConcurrencyManager
from ...conversion.protocols import MetadataExtractor
from ...models.events import EventType, PipelineEvent
from ..base import EventEmitter, RequestContext, notify

logger = logging.getLogger(__name__)


class StructuredStep:
    """
    Runs the structured pass. Must run before ArticleStep.

    The raw page is released here; it is the last consumer of it.
    """

    name = "structured"

    def __init__(self, extractor: MetadataExtractor, concurrency: ConcurrencyManager) -> None:
        self._extractor = extractor
        self._concurrency = concurrency

    async def execute(
        self,
        ctx: RequestContext,
        emit: Optional[EventEmitter] = None,
    ) -> RequestContext:
        if ctx.doc is None:
            return ctx

        raw_html = ctx.raw.html if ctx.raw is not None else None
        ctx.structured = await self._concurrency.run_cpu_bound(self._extractor.extract, ctx.doc, raw_html)
        ctx.raw = None

        notify(
            emit,
            PipelineEvent(
                type=EventType.STRUCTURED_EXTRACTED,
                url=ctx.url,
                message=f"{len(ctx.structured.headings)} headings, {len(ctx.structured.links)} links",
            ),
        )
        return ctx
