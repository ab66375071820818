"""Shared HTTP response helpers for Strava API interactions."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

LOGGER = logging.getLogger(__name__)

__all__ = ["extract_error"]


def extract_error(status: int, body: Optional[str]) -> Optional[str]:
    """Return compact string with Strava error info (message + codes) if present."""

    if not body:
        return None
    try:
        data = json.loads(body)
    except ValueError as exc:
        LOGGER.debug("Failed to decode JSON error body (status=%s): %s", status, exc)
        return _extract_error_text(body)
    if not isinstance(data, dict):
        return None
    parts = _collect_error_parts(data)
    return " | ".join(parts) if parts else None


def _extract_error_text(text: str) -> Optional[str]:
    """Best-effort plain-text extraction when JSON parsing fails."""

    trimmed = text.strip()
    if not trimmed:
        return None
    return (trimmed[:297] + "...") if len(trimmed) > 300 else trimmed


def _collect_error_parts(data: Dict[str, Any]) -> List[str]:
    """Build error snippets from the standard Strava error response."""

    parts: List[str] = []
    message = data.get("message")
    if message:
        parts.append(str(message))
    errors = data.get("errors")
    if isinstance(errors, list):
        for err in errors:
            if not isinstance(err, dict):
                continue
            resource = err.get("resource")
            field = err.get("field")
            code = err.get("code")
            spec = "/".join(filter(None, (resource, field)))
            if code and spec:
                parts.append(f"{spec}:{code}")
            elif code:
                parts.append(str(code))
    return parts
