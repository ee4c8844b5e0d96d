"""PersistStep - document assembly and history save."""

import logging
import uuid
from typing import Optional

from ...errors import PersistenceError
from ...models.document import Document
from ...models.events import EventType, PipelineEvent, RequestState
from ...storage.protocols import DocumentStore
from ..base import EventEmitter, RequestContext, notify

logger = logging.getLogger(__name__)

SAVE_FAILED_WARNING = "Could not save to history"


class PersistStep:
    """
    Assembles the final Document and saves it when a store is configured.

    Runs last, so only fully assembled documents reach the store. A save
    failure does not fail the request: the document gets a ``temp-`` id
    and a warning. Without a store, ids are ``local-`` prefixed.
    """

    name = "persist"

    def __init__(self, store: Optional[DocumentStore] = None) -> None:
        self._store = store

    async def execute(
        self,
        ctx: RequestContext,
        emit: Optional[EventEmitter] = None,
    ) -> RequestContext:
        document = Document(
            source_url=ctx.url,
            title=ctx.title,
            site_name=ctx.site_name,
            markdown=ctx.markdown or "",
            content_html=ctx.content_html,
            plain_text=ctx.plain_text,
            structured_meta=ctx.structured,
            needs_transcript=ctx.needs_transcript,
            owner=ctx.request.owner,
        )
        if ctx.article is not None:
            document.byline = ctx.article.byline
            document.excerpt = ctx.article.excerpt
            document.published_time = ctx.article.published_time

        if self._store is None:
            document.id = f"local-{uuid.uuid4()}"
        else:
            try:
                document.id = await self._store.create(document)
                notify(emit, PipelineEvent(type=EventType.DOCUMENT_SAVED, url=ctx.url, message=document.id))
            except PersistenceError as e:
                logger.warning(f"Failed to save {ctx.url} to history: {e.message}")
                document.id = f"temp-{uuid.uuid4()}"
                document.warning = SAVE_FAILED_WARNING
                notify(emit, PipelineEvent(type=EventType.SAVE_FAILED, url=ctx.url, error=e.message))

        ctx.document = document
        state = RequestState.AWAITING_TRANSCRIPT if document.needs_transcript else RequestState.DONE
        ctx.transition(state, emit)
        return ctx
