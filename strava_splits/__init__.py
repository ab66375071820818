"""Strava lap splits package."""

from .auth import CredentialManager
from .errors import AuthError, SegmentationError, StravaAPIError
from .main import main
from .models import Activity, AppSecrets, Credentials, Lap, TelemetryStream
from .pace import format_duration, format_pace
from .splits import segment

__all__ = [
    "main",
    "CredentialManager",
    "Activity",
    "AppSecrets",
    "Credentials",
    "Lap",
    "TelemetryStream",
    "segment",
    "format_duration",
    "format_pace",
    "AuthError",
    "SegmentationError",
    "StravaAPIError",
]
