"""Central error types used across the application."""

from __future__ import annotations


class AuthError(RuntimeError):
    """Base error for the OAuth credential lifecycle."""


class AuthorizationDeniedError(AuthError):
    """Raised when the provider redirect reports an error instead of a code."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Authorisation denied: {reason}")
        self.reason = reason


class TokenExchangeError(AuthError):
    """Raised when the authorisation code cannot be exchanged for tokens."""


class TokenRefreshError(AuthError):
    """Raised when a refresh token cannot be exchanged for a new access token."""


class SegmentationError(ValueError):
    """Base error for lap segmentation failures."""


class CorruptStreamsError(SegmentationError):
    """Raised when the distance/time/moving streams disagree on their size."""


class InvalidLapDistanceError(SegmentationError):
    """Raised when the requested lap distance is not a positive number."""


class FormatError(ValueError):
    """Raised when a pace or duration cannot be formatted."""


class PaceDivideByZeroError(FormatError):
    """Raised when a pace is requested for a zero distance."""


class TransportError(RuntimeError):
    """Raised when an HTTP request fails before a response is received."""


class StravaAPIError(RuntimeError):
    """Base error for Strava API failures."""


class StravaResourceNotFoundError(StravaAPIError):
    """Raised when an activity or stream does not exist."""


class StravaStreamEmptyError(StravaAPIError):
    """Raised when an activity stream is missing required data series."""


class StorageError(RuntimeError):
    """Raised when secrets, credentials or activities cannot be read or written."""


__all__ = [
    "AuthError",
    "AuthorizationDeniedError",
    "TokenExchangeError",
    "TokenRefreshError",
    "SegmentationError",
    "CorruptStreamsError",
    "InvalidLapDistanceError",
    "FormatError",
    "PaceDivideByZeroError",
    "TransportError",
    "StravaAPIError",
    "StravaResourceNotFoundError",
    "StravaStreamEmptyError",
    "StorageError",
]
