"""Central configuration for the Strava splits tool.

Module constants are read from environment variables (optionally via a local
`.env`). Anything that names a location or an endpoint is bundled into the
frozen settings objects below and handed to the components that need it, so
nothing holds process-wide path state.
"""

from __future__ import annotations

import importlib
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Tuple


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _env_list(key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(key)
    if value is None:
        return default
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    return items or default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Strava settings
# ---------------------------------------------------------------------------
STRAVA_BASE_URL = os.getenv("STRAVA_BASE_URL", "https://www.strava.com/api/v3")
STRAVA_AUTHORIZE_URL = os.getenv(
    "STRAVA_AUTHORIZE_URL", "https://www.strava.com/oauth/authorize"
)
STRAVA_OAUTH_URL = os.getenv("STRAVA_OAUTH_URL", "https://www.strava.com/oauth/token")

# The redirect URI must match the callback domain registered with Strava.
REDIRECT_HOST = os.getenv("STRAVA_REDIRECT_HOST", "localhost")
REDIRECT_PORT = _env_int("STRAVA_REDIRECT_PORT", 8000)

DEFAULT_SCOPES: Tuple[str, ...] = _env_list(
    "STRAVA_SCOPES", ("read", "activity:read_all")
)

# Seconds the redirect listener is kept alive after delivering its result so
# the browser receives the confirmation page.
CALLBACK_GRACE_SECONDS = _env_float("STRAVA_CALLBACK_GRACE_SECONDS", 1.0)

# Client credentials pulled from the environment. Do not hardcode secrets.
# When unset, the secrets file below is used instead.
CLIENT_ID = os.getenv("STRAVA_CLIENT_ID", "")
CLIENT_SECRET = os.getenv("STRAVA_CLIENT_SECRET", "")


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
REQUEST_TIMEOUT = _env_int("STRAVA_REQUEST_TIMEOUT", 15)
HTTP_POOL_CONNECTIONS = 4
HTTP_POOL_MAXSIZE = 4

# Strava caps per_page at 200.
ACTIVITY_PAGE_SIZE = 200

# Print raw tokens after the initial exchange instead of masking them.
PRINT_TOKENS = _env_bool("STRAVA_PRINT_TOKENS", False)


# ---------------------------------------------------------------------------
# Splits
# ---------------------------------------------------------------------------
LAP_DISTANCES: Dict[str, float] = {
    "MILE": 1609.34,
    "1K": 1000.0,
}

# A trailing partial lap shorter than this fraction of a full lap is dropped.
MIN_TRAILING_LAP_FRACTION = 0.1


# ---------------------------------------------------------------------------
# Local files
# ---------------------------------------------------------------------------
SECRETS_FILE = os.getenv("STRAVA_SECRETS_FILE", "auth/secrets.json")
CREDENTIALS_FILE = os.getenv("STRAVA_CREDENTIALS_FILE", "auth/user.json")
ACTIVITIES_DIR = os.getenv("STRAVA_ACTIVITIES_DIR", "activities")


@dataclass(frozen=True)
class OAuthSettings:
    """Endpoints and redirect details for the authorisation flow."""

    authorize_url: str = STRAVA_AUTHORIZE_URL
    token_url: str = STRAVA_OAUTH_URL
    redirect_host: str = REDIRECT_HOST
    redirect_port: int = REDIRECT_PORT
    scopes: Tuple[str, ...] = field(default=DEFAULT_SCOPES)
    grace_seconds: float = CALLBACK_GRACE_SECONDS

    @property
    def redirect_uri(self) -> str:
        return f"http://{self.redirect_host}:{self.redirect_port}"

    @classmethod
    def from_env(cls) -> "OAuthSettings":
        return cls(
            authorize_url=os.getenv("STRAVA_AUTHORIZE_URL", STRAVA_AUTHORIZE_URL),
            token_url=os.getenv("STRAVA_OAUTH_URL", STRAVA_OAUTH_URL),
            redirect_host=os.getenv("STRAVA_REDIRECT_HOST", REDIRECT_HOST),
            redirect_port=_env_int("STRAVA_REDIRECT_PORT", REDIRECT_PORT),
            scopes=_env_list("STRAVA_SCOPES", DEFAULT_SCOPES),
            grace_seconds=_env_float(
                "STRAVA_CALLBACK_GRACE_SECONDS", CALLBACK_GRACE_SECONDS
            ),
        )


@dataclass(frozen=True)
class StoragePaths:
    """Locations of the secrets file, the user credentials and saved activities."""

    secrets_file: Path = Path(SECRETS_FILE)
    credentials_file: Path = Path(CREDENTIALS_FILE)
    activities_dir: Path = Path(ACTIVITIES_DIR)

    @classmethod
    def from_env(cls) -> "StoragePaths":
        return cls(
            secrets_file=Path(os.getenv("STRAVA_SECRETS_FILE", SECRETS_FILE)),
            credentials_file=Path(
                os.getenv("STRAVA_CREDENTIALS_FILE", CREDENTIALS_FILE)
            ),
            activities_dir=Path(os.getenv("STRAVA_ACTIVITIES_DIR", ACTIVITIES_DIR)),
        )
