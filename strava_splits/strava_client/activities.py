"""List the authenticated athlete's activities."""

from __future__ import annotations

import logging
from typing import Any, List

from ..config import ACTIVITY_PAGE_SIZE
from ..errors import StravaAPIError
from ..models import Activity
from .api import ApiResponse, StravaClient
from .response_handling import extract_error

LOGGER = logging.getLogger(__name__)

ACTIVITIES_PATH = "/athlete/activities"


def _decode_page(response: ApiResponse, context: str) -> List[Any]:
    if not response.ok:
        detail = extract_error(response.status, response.body)
        message = f"{context} request failed (status {response.status})"
        if detail:
            message = f"{message} | {detail}"
        LOGGER.error(message)
        raise StravaAPIError(message)
    try:
        data = response.json()
    except ValueError as exc:
        message = f"{context} returned non-JSON payload"
        LOGGER.error(message)
        raise StravaAPIError(message) from exc
    if not isinstance(data, list):
        message = f"{context} payload had unexpected type {type(data).__name__}"
        LOGGER.error(message)
        raise StravaAPIError(message)
    return data


def list_activities(
    client: StravaClient,
    token: str,
    after: int,
    before: int,
    *,
    per_page: int = ACTIVITY_PAGE_SIZE,
) -> List[Activity]:
    """Return activities started between ``after`` and ``before`` (unix seconds).

    Pages through the endpoint until a short page is returned. An empty list
    means no activities in the window.
    """

    activities: List[Activity] = []
    page = 1
    while True:
        context = f"activities page={page}"
        response = client.get(
            ACTIVITIES_PATH,
            {"before": before, "after": after, "page": page, "per_page": per_page},
            token,
        )
        data = _decode_page(response, context)
        for item in data:
            try:
                activities.append(Activity.from_payload(item))
            except (KeyError, TypeError, ValueError) as exc:
                LOGGER.warning("Skipping malformed activity payload: %s", exc)
        LOGGER.debug("%s returned %s activities", context, len(data))
        if len(data) < per_page:
            break
        page += 1
    LOGGER.info(
        "Fetched %s activities between %s and %s", len(activities), after, before
    )
    return activities
