"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable fakes for the HTTP client and
telemetry streams to avoid duplication across files.
"""
from __future__ import annotations

import json
import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from strava_splits.models import AppSecrets, Credentials, TelemetryStream
from strava_splits.strava_client.api import ApiResponse


# --- Factory helpers -------------------------------------------------
def json_response(status, data):
    return ApiResponse(status=status, body=json.dumps(data))


def make_streams(distance, time, moving):
    return TelemetryStream.from_lists(distance, time, moving)


class FakeClient:
    """Records calls and replays queued responses (or raises queued errors)."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.posts = []
        self.gets = []

    def _next(self):
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url, data):
        self.posts.append((url, dict(data)))
        return self._next()

    def get(self, path, params, token):
        self.gets.append((path, dict(params or {}), token))
        return self._next()


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def secrets():
    return AppSecrets(client_id=12345, client_secret="shh-secret")


@pytest.fixture
def credentials():
    return Credentials(
        access_token="access-old-1111",
        expires_at=1_700_000_000,
        refresh_token="refresh-old-2222",
    )


@pytest.fixture
def token_payload():
    return {
        "token_type": "Bearer",
        "access_token": "access-new-3333",
        "expires_at": 1_700_021_600,
        "expires_in": 21600,
        "refresh_token": "refresh-new-4444",
        "athlete": {"id": 1},
    }
