"""Pipeline state and progress events."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class RequestState(str, Enum):
    """Lifecycle of a single distillation request."""

    PENDING = "pending"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    RESOLVING_VIDEO_METADATA = "resolving_video_metadata"
    AWAITING_TRANSCRIPT = "awaiting_transcript"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        # A two-phase document parked on its transcript is a valid resting state
        return self in (RequestState.DONE, RequestState.FAILED, RequestState.AWAITING_TRANSCRIPT)


class EventType(str, Enum):
    """Types of events emitted while processing a request."""

    STATE_CHANGED = "state_changed"

    FETCH_STARTED = "fetch_started"
    FETCH_COMPLETED = "fetch_completed"
    FETCH_FAILED = "fetch_failed"

    STRUCTURED_EXTRACTED = "structured_extracted"
    ARTICLE_EXTRACTED = "article_extracted"
    PAGE_CONVERTED = "page_converted"

    METADATA_RESOLVED = "metadata_resolved"
    TRANSCRIPT_RESOLVED = "transcript_resolved"
    TRANSCRIPT_MISSING = "transcript_missing"

    DOCUMENT_SAVED = "document_saved"
    SAVE_FAILED = "save_failed"


@dataclass
class PipelineEvent:
    """
    Event emitted during a distillation request.

    Example:
        def on_event(event: PipelineEvent) -> None:
            if event.type == EventType.STATE_CHANGED:
                print(f"{event.url}: {event.state.value}")

        document = await distiller.process(url, emit=on_event)
    """

    type: EventType

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    url: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None

    state: Optional[RequestState] = None
    status_code: Optional[int] = None
    bytes_downloaded: Optional[int] = None

    @property
    def is_error(self) -> bool:
        return self.type in (EventType.FETCH_FAILED, EventType.SAVE_FAILED) or (
            self.state == RequestState.FAILED
        )
