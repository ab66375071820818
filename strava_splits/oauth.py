"""Local redirect capture for the Strava OAuth authorisation flow.

A short-lived Flask app served by werkzeug on a background thread receives the
provider's browser redirect and hands exactly one :data:`AuthorizationResult`
to the waiting caller through a single-slot queue.
"""

from __future__ import annotations

import logging
import queue
import threading
import urllib.parse
from typing import List, Optional, Sequence

from flask import Flask, abort, request
from flask.typing import ResponseReturnValue
from markupsafe import escape
from werkzeug.serving import BaseWSGIServer, make_server

from .config import OAuthSettings
from .models import AuthorizationFailure, AuthorizationResult, AuthorizationSuccess

LOGGER = logging.getLogger(__name__)

SUCCESS_MESSAGE = "You may close this browser tab and return to the terminal."


def parse_scopes(raw: str) -> List[str]:
    """Split the comma-separated ``scope`` query value."""

    return [scope for scope in raw.split(",") if scope]


def build_auth_url(
    client_id: int, scopes: Sequence[str], settings: OAuthSettings
) -> str:
    params = {
        "client_id": client_id,
        "redirect_uri": settings.redirect_uri,
        "response_type": "code",
        "approval_prompt": "auto",
        "scope": ",".join(scopes),
    }
    # Strava expects the scope list with literal commas.
    query = urllib.parse.urlencode(params, safe=",:/")
    return f"{settings.authorize_url}?{query}"


class RedirectCaptureListener:
    """Serve ``GET /`` until one authorisation result has been captured."""

    def __init__(self, host: str = "localhost", port: int = 8000) -> None:
        self.host = host
        self.port = port
        self._results: "queue.Queue[AuthorizationResult]" = queue.Queue(maxsize=1)
        self._delivered = False
        self._lock = threading.Lock()
        self._server: Optional[BaseWSGIServer] = None
        self._thread: Optional[threading.Thread] = None
        self.app = self._build_app()

    @classmethod
    def from_settings(cls, settings: OAuthSettings) -> "RedirectCaptureListener":
        return cls(settings.redirect_host, settings.redirect_port)

    def _build_app(self) -> Flask:
        app = Flask(__name__)

        @app.route("/")
        def redirect_capture() -> ResponseReturnValue:
            code = request.args.get("code")
            scope = request.args.get("scope")
            error = request.args.get("error")
            result: AuthorizationResult
            if code is not None and scope is not None:
                result = AuthorizationSuccess(code=code, scopes=parse_scopes(scope))
                body = SUCCESS_MESSAGE
            elif error is not None:
                result = AuthorizationFailure(reason=error)
                body = f"Error: {escape(error)}, please return to the terminal."
            else:
                LOGGER.warning("Redirect received without code or error; ignoring.")
                abort(400, description="Missing code or error parameter")
            if not self._deliver(result):
                LOGGER.warning("Authorisation result already captured; ignoring.")
                return "Authorisation already received.", 409
            return body

        return app

    def _deliver(self, result: AuthorizationResult) -> bool:
        with self._lock:
            if self._delivered:
                return False
            self._delivered = True
        self._results.put_nowait(result)
        if isinstance(result, AuthorizationSuccess):
            LOGGER.info("Authorisation code received via redirect.")
        else:
            LOGGER.warning("Authorisation redirect reported error=%s", result.reason)
        return True

    def start(self) -> None:
        """Bind the port and serve on a daemon thread.

        Port ``0`` binds an ephemeral port; ``self.port`` is updated to it.
        """

        self._server = make_server(self.host, self.port, self.app, threaded=True)
        self.port = self._server.server_port
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name="oauth-redirect-listener",
            daemon=True,
        )
        self._thread.start()
        LOGGER.info(
            "Listening for OAuth redirect on http://%s:%s", self.host, self.port
        )

    def wait_for_result(self) -> AuthorizationResult:
        """Block until the redirect delivers its result. There is no timeout."""

        return self._results.get()

    def stop(self) -> None:
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5)
        self._server = None
        self._thread = None
        LOGGER.debug("OAuth redirect listener stopped.")

    def __enter__(self) -> "RedirectCaptureListener":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
