"""Strava HTTP client components (session, raw client, resource fetchers)."""

from .activities import list_activities  # noqa: F401
from .api import ApiResponse, StravaClient  # noqa: F401
from .session import create_default_session, get_default_session  # noqa: F401
from .streams import get_streams  # noqa: F401
