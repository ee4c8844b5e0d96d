"""FetchStep - primary page download."""

import logging
from typing import Optional

from ...errors import FetchError
from ...http.client import decode_content
from ...http.protocols import HttpClient
from ...models.document import RawPage
from ...models.events import EventType, PipelineEvent, RequestState
from ..base import EventEmitter, RequestContext, notify

logger = logging.getLogger(__name__)

# Allowed content types for HTML documents
ALLOWED_CONTENT_TYPES = frozenset(
    {
        "text/html",
        "application/xhtml+xml",
        "text/xml",
        "application/xml",
        "text/plain",
    }
)


class FetchStep:
    """
    Pipeline step that downloads the source page.

    Populates:
        ctx.raw: Decoded HTML and the final URL after redirects

    Raises:
        FetchTimeout, FetchHTTPError, FetchNetworkError: from the client
        FetchError: the response is not an HTML document

    Example:
        fetch_step = FetchStep(http_client)
        ctx = await fetch_step.execute(ctx)
        print(ctx.raw.final_url)
    """

    name = "fetch"

    def __init__(self, http_client: HttpClient, validate_content_type: bool = True) -> None:
        self._client = http_client
        self._validate_content_type = validate_content_type

    def _is_valid_content_type(self, content_type: str) -> bool:
        if not content_type:
            return True  # Allow if not specified
        base_type = content_type.lower().split(";")[0].strip()
        return base_type in ALLOWED_CONTENT_TYPES

    async def execute(
        self,
        ctx: RequestContext,
        emit: Optional[EventEmitter] = None,
    ) -> RequestContext:
        url = ctx.url
        ctx.transition(RequestState.FETCHING, emit)
        notify(emit, PipelineEvent(type=EventType.FETCH_STARTED, url=url, message=f"Fetching {url}"))

        response = await self._client.get(url, timeout=ctx.request.timeouts.fetch)

        if self._validate_content_type and not self._is_valid_content_type(response.content_type):
            logger.debug(f"Rejecting {url}: content type {response.content_type}")
            raise FetchError(f"Unsupported content type: {response.content_type}", url=url)

        ctx.raw = RawPage(
            html=decode_content(response.content, response.content_type),
            final_url=response.url or url,
        )

        notify(
            emit,
            PipelineEvent(
                type=EventType.FETCH_COMPLETED,
                url=url,
                status_code=response.status_code,
                bytes_downloaded=len(response.content),
            ),
        )
        return ctx
