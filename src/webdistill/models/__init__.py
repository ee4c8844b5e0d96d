"""webdistill configuration, records and event models."""

from .config import (
    DistillConfig,
    ExtractionConfig,
    NetworkConfig,
    PerformanceConfig,
    ProfileName,
    StorageConfig,
    TimeoutConfig,
    VideoConfig,
)
from .document import (
    Article,
    Document,
    ExtractionRequest,
    Heading,
    Image,
    Link,
    RawPage,
    RequestMode,
    StructuredMeta,
    TranscriptResult,
    TranscriptSegment,
    VideoMetadata,
    WikipediaMeta,
)
from .events import EventType, PipelineEvent, RequestState
from .profiles import PROFILES, apply_profile

__all__ = [
    # Config
    "DistillConfig",
    "ExtractionConfig",
    "NetworkConfig",
    "PerformanceConfig",
    "ProfileName",
    "StorageConfig",
    "TimeoutConfig",
    "VideoConfig",
    # Records
    "Article",
    "Document",
    "ExtractionRequest",
    "Heading",
    "Image",
    "Link",
    "RawPage",
    "RequestMode",
    "StructuredMeta",
    "TranscriptResult",
    "TranscriptSegment",
    "VideoMetadata",
    "WikipediaMeta",
    # Events
    "EventType",
    "PipelineEvent",
    "RequestState",
    # Profiles
    "PROFILES",
    "apply_profile",
]
