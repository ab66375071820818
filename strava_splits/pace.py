"""Clock-style duration and pace formatting."""

from __future__ import annotations

import math

from .errors import PaceDivideByZeroError

__all__ = ["format_duration", "format_pace", "pace_seconds"]


def format_duration(seconds: int) -> str:
    """Format ``seconds`` as ``M:SS``, or ``H:MM:SS`` from one hour up.

    The leading unit is never zero-padded. Negative durations keep their sign.
    """

    seconds = int(seconds)
    if seconds < 0:
        return "-" + format_duration(-seconds)
    minutes, sec = divmod(seconds, 60)
    if minutes >= 60:
        hours, minutes = divmod(minutes, 60)
        return f"{hours}:{minutes:02d}:{sec:02d}"
    return f"{minutes}:{sec:02d}"


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def pace_seconds(
    reference_distance: float, actual_distance: float, moving_time: float
) -> int:
    """Return seconds per ``reference_distance`` rounded to the nearest second."""

    if not actual_distance or not reference_distance:
        raise PaceDivideByZeroError(
            f"Cannot compute pace for distance={actual_distance} "
            f"reference={reference_distance}"
        )
    return _round_half_away(moving_time / (actual_distance / reference_distance))


def format_pace(
    reference_distance: float, actual_distance: float, moving_time: float
) -> str:
    """Format the pace per ``reference_distance`` (e.g. ``"7:32"`` per mile)."""

    return format_duration(
        pace_seconds(reference_distance, actual_distance, moving_time)
    )
