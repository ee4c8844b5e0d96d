"""ConvertStep - content HTML to Markdown."""

import logging
from typing import Optional

from ...concurrency.manager import ConcurrencyManager
from ...conversion.protocols import MarkdownRenderer
from ...models.events import EventType, PipelineEvent
from ..base import EventEmitter, RequestContext, notify

logger = logging.getLogger(__name__)


class ConvertStep:
    """
    Serializes ``ctx.content_html`` into ``ctx.markdown``.

    This is the only place a request's Markdown is produced.
    """

    name = "convert"

    def __init__(self, serializer: MarkdownRenderer, concurrency: ConcurrencyManager) -> None:
        self._serializer = serializer
        self._concurrency = concurrency

    async def execute(
        self,
        ctx: RequestContext,
        emit: Optional[EventEmitter] = None,
    ) -> RequestContext:
        ctx.markdown = await self._concurrency.run_cpu_bound(self._serializer.serialize, ctx.content_html)
        logger.debug(f"Converted {ctx.url} to {len(ctx.markdown)} characters of Markdown")

        notify(emit, PipelineEvent(type=EventType.PAGE_CONVERTED, url=ctx.url))
        return ctx
