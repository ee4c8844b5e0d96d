"""Pipeline step implementations."""

from .article import ArticleStep
from .convert import ConvertStep
from .fetch import FetchStep
from .parse import ParseStep
from .persist import PersistStep
from .structured import StructuredStep
from .video import VideoStep

__all__ = [
    "ArticleStep",
    "ConvertStep",
    "FetchStep",
    "ParseStep",
    "PersistStep",
    "StructuredStep",
    "VideoStep",
]
