"""Request/response adapter for embedding webdistill in a web service.

The handlers take a decoded JSON payload and return an ``ApiResponse``
with an HTTP status code and a JSON-serializable body, so any framework
can expose them with a few lines of glue.

Example:
    async with Distiller(config) as distiller:
        response = await handle_process(distiller, {"url": "https://example.com"})
        return web.json_response(response.body, status=response.status_code)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .core.distiller import Distiller
from .errors import DistillError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


@dataclass(frozen=True)
class ApiResponse:
    status_code: int
    body: dict[str, Any]

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def _error(status_code: int, message: str) -> ApiResponse:
    return ApiResponse(status_code=status_code, body={"error": message})


def _from_exception(e: DistillError) -> ApiResponse:
    # Internal details stay in the logs
    if e.status_code >= 500:
        return _error(e.status_code, INTERNAL_ERROR_MESSAGE)
    return _error(e.status_code, e.message)


async def handle_process(
    distiller: Distiller,
    payload: Any,
    owner: Optional[str] = None,
) -> ApiResponse:
    """
    Handle ``{"url": ..., "twoPhase": ...}``.

    Returns:
        200 with the document body; 400 for a malformed payload or URL;
        422 when the page can't be fetched or has no extractable content;
        500 for anything unexpected
    """
    if not isinstance(payload, dict):
        return _error(400, "Request body must be a JSON object")

    url = payload.get("url")
    if not isinstance(url, str) or not url.strip():
        return _error(400, "URL is required")

    two_phase = payload.get("twoPhase")
    if two_phase is not None and not isinstance(two_phase, bool):
        return _error(400, "twoPhase must be a boolean")

    try:
        document = await distiller.process(url, two_phase=two_phase, owner=owner)
    except DistillError as e:
        return _from_exception(e)
    except Exception:
        logger.exception(f"Unexpected error processing {url}")
        return _error(500, INTERNAL_ERROR_MESSAGE)

    return ApiResponse(status_code=200, body=document.to_dict())


async def handle_transcript(distiller: Distiller, payload: Any) -> ApiResponse:
    """
    Handle ``{"docId": ...}`` or ``{"url": ...}``.

    Returns:
        200 with ``{success, markdown}`` for a stored document or
        ``{success, transcript}`` for a bare URL; 400 when neither is
        given; 404 for an unknown document
    """
    if not isinstance(payload, dict):
        return _error(400, "Request body must be a JSON object")

    doc_id = payload.get("docId")
    url = payload.get("url")
    if not isinstance(doc_id, str) or not doc_id:
        doc_id = None
    if not isinstance(url, str) or not url.strip():
        url = None
    if doc_id is None and url is None:
        return _error(400, "Missing docId or url")

    try:
        result = await distiller.resolve_transcript(doc_id=doc_id, url=url)
    except DistillError as e:
        return _from_exception(e)
    except Exception:
        logger.exception(f"Unexpected error resolving transcript for {doc_id or url}")
        return _error(500, INTERNAL_ERROR_MESSAGE)

    return ApiResponse(status_code=200, body=result.to_dict())
