"""Thin Strava HTTP client returning raw status/body pairs.

Callers decide what a non-2xx status means; only transport failures (no
response at all) are raised, as :class:`TransportError`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import requests

from ..config import REQUEST_TIMEOUT, STRAVA_BASE_URL
from ..errors import TransportError
from .session import get_default_session

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiResponse:
    status: int
    body: str
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decode the body, raising ``ValueError`` when it is not JSON."""

        return json.loads(self.body)


class StravaClient:
    """GET/POST wrapper around a shared ``requests.Session``."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        base_url: str = STRAVA_BASE_URL,
        timeout: int = REQUEST_TIMEOUT,
    ) -> None:
        self._session = session or get_default_session()
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]],
        token: str,
    ) -> ApiResponse:
        url = f"{self._base_url}/{path.lstrip('/')}"
        LOGGER.debug("GET %s params=%s", url, params)
        try:
            response = self._session.get(
                url,
                headers={"Authorization": f"Bearer {token}"},
                params=params,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            LOGGER.error("GET %s transport error: %s", url, exc.__class__.__name__)
            raise TransportError(f"GET {path} failed: {exc}") from exc
        LOGGER.debug("GET %s status=%s", url, response.status_code)
        return _wrap(response)

    def post(self, url: str, data: Dict[str, Any]) -> ApiResponse:
        """POST a form-encoded body to an absolute ``url``."""

        LOGGER.debug("POST %s fields=%s", url, sorted(data))
        try:
            response = self._session.post(url, data=data, timeout=self._timeout)
        except requests.RequestException as exc:
            LOGGER.error("POST %s transport error: %s", url, exc.__class__.__name__)
            raise TransportError(f"POST {url} failed: {exc}") from exc
        LOGGER.debug("POST %s status=%s", url, response.status_code)
        return _wrap(response)


def _wrap(response: requests.Response) -> ApiResponse:
    return ApiResponse(
        status=response.status_code,
        body=response.text,
        headers=dict(response.headers or {}),
    )
