"""Unit tests for the OAuth redirect capture listener."""

import queue
import threading

import pytest
import requests

from strava_splits import oauth
from strava_splits.auth import CredentialManager
from strava_splits.config import OAuthSettings
from strava_splits.errors import AuthorizationDeniedError
from strava_splits.models import AuthorizationFailure, AuthorizationSuccess


@pytest.fixture
def listener():
    return oauth.RedirectCaptureListener("localhost", 8000)


def test_success_redirect_delivers_code_and_scopes(listener):
    client = listener.app.test_client()
    resp = client.get("/?code=abc123&scope=read,activity:read_all")
    assert resp.status_code == 200
    assert b"close this browser tab" in resp.data
    assert listener.wait_for_result() == AuthorizationSuccess(
        code="abc123", scopes=["read", "activity:read_all"]
    )


def test_error_redirect_delivers_failure(listener):
    client = listener.app.test_client()
    resp = client.get("/?error=access_denied")
    assert resp.status_code == 200
    assert b"access_denied" in resp.data
    assert listener.wait_for_result() == AuthorizationFailure(reason="access_denied")


def test_only_first_result_is_delivered(listener):
    client = listener.app.test_client()
    assert client.get("/?code=first&scope=read").status_code == 200
    second = client.get("/?code=second&scope=read")
    assert second.status_code == 409
    assert listener.wait_for_result().code == "first"
    with pytest.raises(queue.Empty):
        listener._results.get_nowait()


def test_redirect_without_code_or_error_is_rejected(listener):
    client = listener.app.test_client()
    resp = client.get("/?scope=read")
    assert resp.status_code == 400
    with pytest.raises(queue.Empty):
        listener._results.get_nowait()


def test_parse_scopes():
    assert oauth.parse_scopes("read,activity:read_all") == ["read", "activity:read_all"]
    assert oauth.parse_scopes("") == []


def test_build_auth_url_uses_settings():
    settings = OAuthSettings(
        authorize_url="https://example.test/oauth/authorize",
        redirect_host="127.0.0.1",
        redirect_port=9001,
    )
    url = oauth.build_auth_url(42, ["read"], settings)
    assert url == (
        "https://example.test/oauth/authorize?client_id=42"
        "&redirect_uri=http://127.0.0.1:9001&response_type=code"
        "&approval_prompt=auto&scope=read"
    )


def test_listener_from_settings():
    settings = OAuthSettings(redirect_host="127.0.0.1", redirect_port=9002)
    listener = oauth.RedirectCaptureListener.from_settings(settings)
    assert (listener.host, listener.port) == ("127.0.0.1", 9002)


def test_denied_redirect_over_http_reaches_waiting_caller(secrets):
    settings = OAuthSettings(
        redirect_host="127.0.0.1", redirect_port=0, grace_seconds=0.5
    )
    listener = oauth.RedirectCaptureListener.from_settings(settings)
    browser_responses = []

    def browser_visit():
        url = f"http://127.0.0.1:{listener.port}/?error=access_denied"
        browser_responses.append(requests.get(url, timeout=5))

    browser = threading.Thread(target=browser_visit)

    def open_browser(url):
        browser.start()
        return True

    manager = CredentialManager(
        settings,
        client=object(),
        listener_factory=lambda s: listener,
        open_browser=open_browser,
    )
    with pytest.raises(AuthorizationDeniedError) as excinfo:
        manager.acquire_initial_credentials(secrets)
    browser.join(timeout=5)

    assert excinfo.value.reason == "access_denied"
    assert browser_responses[0].status_code == 200
    assert "Error: access_denied" in browser_responses[0].text

    # Stopping released the port, so it can be served again.
    again = oauth.RedirectCaptureListener("127.0.0.1", listener.port)
    again.start()
    again.stop()
