"""Fixed-distance lap segmentation of activity telemetry.

Converts the parallel distance/time/moving streams of one activity into an
ordered list of laps, each carrying its distance and moving time. Paused
samples are excluded from moving time.
"""

from __future__ import annotations

import logging
import math
from typing import List

from .config import MIN_TRAILING_LAP_FRACTION
from .errors import CorruptStreamsError, InvalidLapDistanceError
from .models import Lap, TelemetryStream

LOGGER = logging.getLogger(__name__)

__all__ = ["segment", "calc_moving_time"]


def _validate(streams: TelemetryStream) -> int:
    """Return the shared sample count, raising when the series disagree."""

    sizes = {
        "distance": streams.distance.original_size,
        "time": streams.time.original_size,
        "moving": streams.moving.original_size,
    }
    lengths = {
        "distance": len(streams.distance.data),
        "time": len(streams.time.data),
        "moving": len(streams.moving.data),
    }
    if len(set(sizes.values())) != 1:
        raise CorruptStreamsError(f"Stream original_size mismatch: {sizes}")
    if len(set(lengths.values())) != 1:
        raise CorruptStreamsError(f"Stream data length mismatch: {lengths}")
    return lengths["distance"]


def calc_moving_time(start: int, end: int, streams: TelemetryStream) -> int:
    """Return moving time in seconds over the closed index range ``[start, end]``.

    Elapsed time minus stopped time, where each non-moving sample adds the gap
    since the last moving sample seen inside the range. The last moving
    timestamp starts at 0 for every range, so a range that opens on a
    stationary sample measures that first gap from time zero rather than from
    ``time[start]``. This overstates stopped time at the start of such a range
    and is kept for compatibility with previously computed laps.
    """

    times = streams.time.data
    moving = streams.moving.data
    last_moving_time = 0
    stopped_time = 0
    elapsed_time = times[end] - times[start]

    for i in range(start, end + 1):
        if moving[i]:
            last_moving_time = times[i]
        else:
            stopped_time += times[i] - last_moving_time

    return int(elapsed_time - stopped_time)


def _make_lap(number: int, start: int, end: int, streams: TelemetryStream) -> Lap:
    distance = streams.distance.data
    return Lap(
        name=f"Lap {number}",
        distance=distance[end] - distance[start],
        moving_time=calc_moving_time(start, end, streams),
    )


def segment(streams: TelemetryStream, lap_distance: float) -> List[Lap]:
    """Split ``streams`` into laps of ``lap_distance`` metres.

    A lap closes at the first sample whose cumulative distance reaches the
    next multiple of ``lap_distance``; that sample also opens the next lap.
    The remainder after the last full lap is reported as a final partial lap
    only when it covers at least ``MIN_TRAILING_LAP_FRACTION`` of a lap.

    Raises:
        InvalidLapDistanceError: ``lap_distance`` is not positive.
        CorruptStreamsError: the three series report different sizes.
    """

    if not math.isfinite(lap_distance) or lap_distance <= 0:
        raise InvalidLapDistanceError(f"Lap distance must be positive: {lap_distance}")
    count = _validate(streams)
    if count == 0:
        return []

    distance = streams.distance.data
    laps: List[Lap] = []
    lap_number = 1
    start = 0
    for cur in range(count):
        if distance[cur] / lap_distance >= lap_number:
            laps.append(_make_lap(lap_number, start, cur, streams))
            start = cur
            lap_number += 1

    end = count - 1
    remaining = distance[end] - distance[start]
    if remaining / lap_distance >= MIN_TRAILING_LAP_FRACTION:
        laps.append(_make_lap(lap_number, start, end, streams))
    elif remaining > 0:
        LOGGER.debug(
            "Dropping trailing fragment of %.1fm (< %.0f%% of %.1fm lap)",
            remaining,
            MIN_TRAILING_LAP_FRACTION * 100,
            lap_distance,
        )
    return laps
