"""ParseStep - sanitize and parse the fetched page."""

import logging
from typing import Optional

from ...concurrency.manager import ConcurrencyManager
from ...conversion.dom import ParsedDocument
from ...conversion.sanitizer import HtmlSanitizer
from ...models.events import RequestState
from ..base import EventEmitter, RequestContext

logger = logging.getLogger(__name__)


class ParseStep:
    """
    Sanitizes ``ctx.raw`` and parses the result into ``ctx.doc``.

    The tree is anchored to the final URL, so relative links resolve
    against the page that was actually served.
    """

    name = "parse"

    def __init__(self, sanitizer: HtmlSanitizer, concurrency: ConcurrencyManager) -> None:
        self._sanitizer = sanitizer
        self._concurrency = concurrency

    async def execute(
        self,
        ctx: RequestContext,
        emit: Optional[EventEmitter] = None,
    ) -> RequestContext:
        if ctx.raw is None:
            return ctx

        ctx.transition(RequestState.EXTRACTING, emit)
        clean_html = await self._concurrency.run_cpu_bound(self._sanitizer.sanitize, ctx.raw.html)
        ctx.doc = await self._concurrency.run_cpu_bound(ParsedDocument.parse, clean_html, ctx.raw.final_url)
        return ctx
