"""
webdistill - Turn web pages and YouTube videos into LLM-ready Markdown.

Usage:
    from webdistill import Distiller, DistillConfig, ProfileName

    config = DistillConfig(profile=ProfileName.LOCAL)

    async with Distiller(config) as distiller:
        document = await distiller.process("https://en.wikipedia.org/wiki/Python")
        print(document.title)
        print(document.markdown)
"""

__version__ = "1.0.0"

from .api import ApiResponse, handle_process, handle_transcript
from .core.distiller import Distiller, distill_blocking
from .errors import (
    DistillError,
    DocumentNotFound,
    ExtractionFailed,
    FetchError,
    FetchHTTPError,
    FetchNetworkError,
    FetchTimeout,
    MetadataUnavailable,
    PersistenceError,
    TranscriptUnavailable,
    ValidationError,
)
from .logging_config import setup_logging
from .models.config import (
    DistillConfig,
    ExtractionConfig,
    NetworkConfig,
    PerformanceConfig,
    ProfileName,
    StorageConfig,
    TimeoutConfig,
    VideoConfig,
)
from .models.document import Document, TranscriptResult
from .models.events import EventType, PipelineEvent, RequestState

__all__ = [
    "__version__",
    # Core
    "Distiller",
    "distill_blocking",
    "setup_logging",
    # API
    "ApiResponse",
    "handle_process",
    "handle_transcript",
    # Config
    "DistillConfig",
    "ProfileName",
    "NetworkConfig",
    "TimeoutConfig",
    "ExtractionConfig",
    "VideoConfig",
    "StorageConfig",
    "PerformanceConfig",
    # Records
    "Document",
    "TranscriptResult",
    # Events
    "EventType",
    "PipelineEvent",
    "RequestState",
    # Errors
    "DistillError",
    "DocumentNotFound",
    "ExtractionFailed",
    "FetchError",
    "FetchHTTPError",
    "FetchNetworkError",
    "FetchTimeout",
    "MetadataUnavailable",
    "PersistenceError",
    "TranscriptUnavailable",
    "ValidationError",
]
