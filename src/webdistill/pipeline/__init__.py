"""Pipeline architecture for webdistill."""

from .base import DistillPipeline, EventEmitter, PipelineStep, RequestContext
from .steps import (
    ArticleStep,
    ConvertStep,
    FetchStep,
    ParseStep,
    PersistStep,
    StructuredStep,
    VideoStep,
)

__all__ = [
    # Base
    "DistillPipeline",
    "EventEmitter",
    "PipelineStep",
    "RequestContext",
    # Steps
    "ArticleStep",
    "ConvertStep",
    "FetchStep",
    "ParseStep",
    "PersistStep",
    "StructuredStep",
    "VideoStep",
]
