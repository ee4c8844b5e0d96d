"""ArticleStep - readability extraction."""

import logging
from typing import Optional
from urllib.parse import urlparse

from ...concurrency.manager import ConcurrencyManager
from ...conversion.protocols import ContentExtractor
from ...models.events import EventType, PipelineEvent
from ..base import EventEmitter, RequestContext, notify

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"


class ArticleStep:
    """
    Isolates the article and fills the document fields from it.

    Populates:
        ctx.article, ctx.title, ctx.site_name, ctx.content_html, ctx.plain_text

    Raises:
        ExtractionFailed: propagated from the extractor; the request fails
    """

    name = "article"

    def __init__(self, extractor: ContentExtractor, concurrency: ConcurrencyManager) -> None:
        self._extractor = extractor
        self._concurrency = concurrency

    async def execute(
        self,
        ctx: RequestContext,
        emit: Optional[EventEmitter] = None,
    ) -> RequestContext:
        if ctx.doc is None:
            return ctx

        article = await self._concurrency.run_cpu_bound(self._extractor.extract, ctx.doc)
        ctx.article = article
        ctx.title = article.title or UNTITLED
        ctx.site_name = article.site_name or urlparse(ctx.doc.base_url).hostname or ""
        ctx.content_html = article.content_html
        ctx.plain_text = article.plain_text

        notify(
            emit,
            PipelineEvent(
                type=EventType.ARTICLE_EXTRACTED,
                url=ctx.url,
                message=f"{article.length} characters",
            ),
        )
        return ctx
