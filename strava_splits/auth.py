"""OAuth credential lifecycle for a single Strava user.

Runs the one-time authorisation-code flow through the local redirect listener,
and exchanges the refresh token whenever the stored access token has expired.
Persisting the returned credentials is left to the caller.
"""

from __future__ import annotations

import logging
import time
import webbrowser
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Type

from .config import PRINT_TOKENS, OAuthSettings
from .errors import (
    AuthError,
    AuthorizationDeniedError,
    TokenExchangeError,
    TokenRefreshError,
    TransportError,
)
from .models import AppSecrets, AuthorizationFailure, Credentials
from .oauth import RedirectCaptureListener, build_auth_url
from .strava_client.api import StravaClient
from .strava_client.response_handling import extract_error

LOGGER = logging.getLogger(__name__)

ListenerFactory = Callable[[OAuthSettings], RedirectCaptureListener]


def _mask_tail(value: str | None, visible: int = 4) -> str:
    if not value:
        return ""
    if len(value) <= visible:
        return "****"
    return f"****{value[-visible:]}"


def _open_browser(url: str) -> bool:
    try:
        return webbrowser.open(url)
    except webbrowser.Error as exc:
        LOGGER.debug("webbrowser.open failed: %s", exc)
        return False


class CredentialManager:
    """Hands out currently-valid access tokens for one user."""

    def __init__(
        self,
        settings: OAuthSettings | None = None,
        *,
        client: StravaClient | None = None,
        listener_factory: ListenerFactory = RedirectCaptureListener.from_settings,
        open_browser: Callable[[str], bool] = _open_browser,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings or OAuthSettings.from_env()
        self._client = client or StravaClient()
        self._listener_factory = listener_factory
        self._open_browser = open_browser
        self._clock = clock
        self._sleep = sleep

    @property
    def settings(self) -> OAuthSettings:
        return self._settings

    def acquire_initial_credentials(
        self, secrets: AppSecrets, scopes: Optional[Sequence[str]] = None
    ) -> Credentials:
        """Run the browser authorisation flow and exchange the returned code.

        Blocks until the browser is redirected back to the local listener; no
        timeout is applied.

        Raises:
            AuthorizationDeniedError: the user (or provider) refused access.
            TokenExchangeError: the code could not be exchanged for tokens.
        """

        if scopes is None:
            scopes = self._settings.scopes
        scope_list = list(scopes)
        auth_url = build_auth_url(secrets.client_id, scope_list, self._settings)

        listener = self._listener_factory(self._settings)
        try:
            listener.start()
        except OSError as exc:
            LOGGER.error("Could not start OAuth redirect listener: %s", exc)
            raise AuthError(
                f"Redirect listener could not bind {self._settings.redirect_uri}"
            ) from exc
        try:
            LOGGER.info("Opening browser for authorisation...")
            if not self._open_browser(auth_url):
                LOGGER.warning(
                    "Could not open a browser. Visit the following URL to "
                    "authorise this app with Strava:\n%s",
                    auth_url,
                )
            result = listener.wait_for_result()
        finally:
            # Let the listener finish writing its response to the browser.
            self._sleep(self._settings.grace_seconds)
            LOGGER.info("Shutting down local OAuth listener.")
            listener.stop()

        if isinstance(result, AuthorizationFailure):
            raise AuthorizationDeniedError(result.reason)

        missing = set(scope_list) - set(result.scopes)
        if missing:
            LOGGER.warning("Authorisation granted without scopes: %s", sorted(missing))
        return self.exchange_code(result.code, secrets)

    def exchange_code(self, code: str, secrets: AppSecrets) -> Credentials:
        """Exchange a one-time authorisation code for user credentials."""

        LOGGER.info("Exchanging authorisation code for tokens...")
        payload = {
            "client_id": secrets.client_id,
            "client_secret": secrets.client_secret,
            "code": code,
            "grant_type": "authorization_code",
        }
        credentials = self._token_request(payload, TokenExchangeError, "Token exchange")
        if PRINT_TOKENS:
            LOGGER.warning("Printing raw Strava tokens to stdout. Handle with care!")
            LOGGER.info("Access Token: %s", credentials.access_token)
            LOGGER.info("Refresh Token: %s", credentials.refresh_token)
        else:
            LOGGER.info(
                "Token exchange succeeded: access_token=%s refresh_token=%s "
                "expires_at=%s",
                _mask_tail(credentials.access_token),
                _mask_tail(credentials.refresh_token),
                credentials.expires_at,
            )
        return credentials

    def refresh(self, refresh_token: str, secrets: AppSecrets) -> Credentials:
        """Exchange ``refresh_token`` for fresh credentials.

        Raises:
            TokenRefreshError: transport failure, non-2xx status or a malformed
                response body.
        """

        if not refresh_token:
            raise TokenRefreshError("Missing refresh token")
        LOGGER.info(
            "Refreshing Strava token refresh_token=%s", _mask_tail(refresh_token)
        )
        payload = {
            "client_id": secrets.client_id,
            "client_secret": secrets.client_secret,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        credentials = self._token_request(payload, TokenRefreshError, "Token refresh")
        LOGGER.info(
            "Token refresh succeeded access_token_len=%s refresh_token_changed=%s "
            "expires_at=%s",
            len(credentials.access_token),
            credentials.refresh_token != refresh_token,
            credentials.expires_at,
        )
        return credentials

    def get_valid_token(
        self, credentials: Credentials, secrets: AppSecrets
    ) -> Tuple[Credentials, str]:
        """Return ``(credentials, access_token)`` with a token that has not expired.

        When a refresh was needed the returned credentials are a new object the
        caller should persist; ``credentials`` itself is never modified.
        """

        if not credentials.is_expired(self._clock()):
            return credentials, credentials.access_token
        LOGGER.info("Access token expired at %s; refreshing.", credentials.expires_at)
        refreshed = self.refresh(credentials.refresh_token, secrets)
        return refreshed, refreshed.access_token

    def _token_request(
        self,
        payload: Dict[str, Any],
        error_cls: Type[AuthError],
        context: str,
    ) -> Credentials:
        token_url = self._settings.token_url
        LOGGER.debug("Token endpoint: %s", token_url)
        LOGGER.debug(
            {"client_id": payload["client_id"], "grant_type": payload["grant_type"]}
        )
        try:
            response = self._client.post(token_url, payload)
        except TransportError as exc:
            LOGGER.error("%s transport error: %s", context, exc)
            raise error_cls(f"Transport failure during {context.lower()}") from exc

        if not response.ok:
            detail = extract_error(response.status, response.body)
            LOGGER.error(
                "%s failed status=%s%s",
                context,
                response.status,
                f" detail={detail}" if detail else "",
            )
            raise error_cls(f"{context} failed with status {response.status}")

        try:
            data = response.json()
        except ValueError as exc:
            LOGGER.error("Invalid JSON in token response: %s", exc)
            raise error_cls("Invalid JSON in token response") from exc
        if not isinstance(data, dict):
            LOGGER.error("Unexpected token response shape: %s", type(data).__name__)
            raise error_cls("Unexpected token response shape")
        try:
            return Credentials.from_token_payload(data)
        except (KeyError, TypeError, ValueError) as exc:
            LOGGER.error("Token response missing expected fields: %s", exc)
            raise error_cls("Token response missing expected fields") from exc
