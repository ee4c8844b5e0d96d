"""Exception hierarchy for webdistill.

Every error carries an HTTP-style ``status_code`` so the API layer can map
failures onto a stable machine-checkable response without inspecting types.
"""

from __future__ import annotations


class DistillError(Exception):
    """Base class for all webdistill errors."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(DistillError):
    """The request is malformed (missing or non-absolute URL)."""

    status_code = 400


class FetchError(DistillError):
    """An outbound HTTP request failed."""

    status_code = 422

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class FetchTimeout(FetchError):
    """The request did not complete within its time budget."""


class FetchHTTPError(FetchError):
    """The server answered with a non-2xx status."""

    def __init__(self, status: int, url: str | None = None, reason: str | None = None) -> None:
        message = f"Failed to fetch page: {status}"
        if reason:
            message = f"{message} {reason}"
        super().__init__(message, url=url)
        self.status = status


class FetchNetworkError(FetchError):
    """Transport-level failure (DNS, connection reset, oversized body, ...)."""


class ExtractionFailed(DistillError):
    """The readability pass found no content block worth keeping."""

    status_code = 422


class MetadataUnavailable(DistillError):
    """Every YouTube metadata source failed."""

    status_code = 422


class TranscriptUnavailable(DistillError):
    """No captions could be retrieved for a video."""

    status_code = 422


class DocumentNotFound(DistillError):
    """No stored document has the requested id."""

    status_code = 404


class PersistenceError(DistillError):
    """The document store rejected a read or write."""

    status_code = 500
