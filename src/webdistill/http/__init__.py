"""HTTP client for webdistill."""

from .client import AsyncHttpClient, decode_content
from .protocols import HttpClient, HttpResponse

__all__ = [
    "AsyncHttpClient",
    "decode_content",
    "HttpClient",
    "HttpResponse",
]
