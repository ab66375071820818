"""Fetch the distance/time/moving streams of one activity."""

from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import (
    CorruptStreamsError,
    StravaAPIError,
    StravaResourceNotFoundError,
    StravaStreamEmptyError,
)
from ..models import StreamSeries, TelemetryStream
from .api import StravaClient
from .response_handling import extract_error

LOGGER = logging.getLogger(__name__)

STREAM_KEYS = ("distance", "time", "moving")


def get_streams(client: StravaClient, token: str, activity_id: int) -> TelemetryStream:
    """Return the telemetry streams for ``activity_id``.

    Raises:
        StravaResourceNotFoundError: the activity has no streams (404).
        StravaStreamEmptyError: one of the required series is missing, as for
            manually logged activities.
        StravaAPIError: any other non-2xx status or a malformed payload.
        CorruptStreamsError: a series has unusable data or size fields.
    """

    context = f"activity_stream:{activity_id}"
    response = client.get(
        f"/activities/{activity_id}/streams",
        {"keys": ",".join(STREAM_KEYS), "key_by_type": "true"},
        token,
    )
    if not response.ok:
        detail = extract_error(response.status, response.body)
        suffix = f" | {detail}" if detail else ""
        if response.status == 404:
            message = f"{context} not found{suffix}"
            LOGGER.info(message)
            raise StravaResourceNotFoundError(message)
        message = f"{context} request failed (status {response.status}){suffix}"
        LOGGER.error(message)
        raise StravaAPIError(message)

    try:
        data = response.json()
    except ValueError as exc:
        message = f"{context} returned non-JSON payload"
        LOGGER.error(message)
        raise StravaAPIError(message) from exc
    if not isinstance(data, dict):
        message = f"{context} payload had unexpected type {type(data).__name__}"
        LOGGER.error(message)
        raise StravaAPIError(message)

    series: Dict[str, StreamSeries] = {}
    for key in STREAM_KEYS:
        payload: Any = data.get(key)
        if not isinstance(payload, dict):
            raise StravaStreamEmptyError(f"{context} missing {key} stream")
        try:
            series[key] = StreamSeries.from_payload(payload)
        except (TypeError, ValueError) as exc:
            message = f"{context} has a malformed {key} stream: {exc}"
            LOGGER.warning(message)
            raise CorruptStreamsError(message) from exc
    return TelemetryStream(**series)
