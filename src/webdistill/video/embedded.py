"""Extraction of JSON blobs that YouTube inlines into its HTML."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

_DECODER = json.JSONDecoder()


def extract_embedded_json(html: str, name: str) -> Optional[dict[str, Any]]:
    """
    Decode the object literal assigned to ``name`` in an inline script.

    Matches ``var ytInitialData = {...};`` as well as
    ``window["ytInitialData"] = {...};``. Returns None when the variable
    is missing or its value is not a JSON object.
    """
    pattern = re.compile(rf"""(?:\b{re.escape(name)}|\[["']{re.escape(name)}["']\])\s*=\s*\{{""")
    match = pattern.search(html)
    if match is None:
        return None
    try:
        data, _ = _DECODER.raw_decode(html, match.end() - 1)
    except ValueError as e:
        logger.debug(f"Could not decode embedded {name}: {e}")
        return None
    return data if isinstance(data, dict) else None


def dig(data: Any, *path: Any) -> Any:
    """
    Follow ``path`` through nested dicts and lists, or return None.

    Example:
        >>> dig({"a": [{"b": 1}]}, "a", 0, "b")
        1
    """
    current = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
        elif not isinstance(current, dict):
            return None
        current = current[key] if isinstance(key, int) else current.get(key)
        if current is None:
            return None
    return current
