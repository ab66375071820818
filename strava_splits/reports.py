"""Per-activity and weekly summaries plus batch split computation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence

import pandas as pd

from .config import LAP_DISTANCES
from .errors import (
    PaceDivideByZeroError,
    SegmentationError,
    StravaResourceNotFoundError,
    StravaStreamEmptyError,
)
from .models import Activity, Lap, TelemetryStream
from .pace import format_duration, format_pace
from .splits import segment

LOGGER = logging.getLogger(__name__)

UNIT_LABELS = {"MILE": "mi", "1K": "K"}
PACE_LABELS = {"MILE": "min/mi", "1K": "min/k"}
LAP_COLUMNS = ["Lap", "Distance", "Pace", "Moving Time"]

StreamFetcher = Callable[[int], TelemetryStream]


def normalize_interval(interval: str) -> str:
    key = (interval or "").strip().upper()
    if key not in LAP_DISTANCES:
        raise ValueError(
            f"Unsupported interval {interval!r}; choose from "
            f"{', '.join(k.lower() for k in LAP_DISTANCES)}"
        )
    return key


def lap_distance_for(interval: str) -> float:
    """Return the lap length in metres for ``mile`` or ``1k``."""

    return LAP_DISTANCES[normalize_interval(interval)]


def _safe_pace(reference: float, distance: float, moving_time: int) -> str:
    try:
        return format_pace(reference, distance, moving_time)
    except PaceDivideByZeroError:
        return "-"


@dataclass(frozen=True)
class ActivitySummary:
    name: str
    date: str
    distance: float
    unit: str
    pace: str
    pace_unit: str
    moving_time: str

    def render(self) -> str:
        lines = [self.name] if self.name else []
        if self.date:
            lines.append(f"Date: {self.date}")
        lines.extend(
            [
                f"Distance: {self.distance:.2f}{self.unit}",
                f"Pace: {self.pace} {self.pace_unit}",
                f"Moving Time: {self.moving_time}",
            ]
        )
        return "\n".join(lines)


def summarize_activity(activity: Activity, interval: str) -> ActivitySummary:
    key = normalize_interval(interval)
    reference = LAP_DISTANCES[key]
    try:
        date = activity.start_date.strftime("%m-%d-%Y")
    except ValueError:
        LOGGER.warning(
            "Activity %s has unparseable start date %r",
            activity.id,
            activity.start_date_local,
        )
        date = activity.start_date_local
    return ActivitySummary(
        name=activity.name,
        date=date,
        distance=activity.distance / reference,
        unit=UNIT_LABELS[key],
        pace=_safe_pace(reference, activity.distance, activity.moving_time),
        pace_unit=PACE_LABELS[key],
        moving_time=format_duration(activity.moving_time),
    )


def summarize_week(activities: Iterable[Activity], interval: str) -> ActivitySummary:
    """Total distance and moving time across ``activities``."""

    key = normalize_interval(interval)
    reference = LAP_DISTANCES[key]
    distance = 0.0
    moving_time = 0
    for activity in activities:
        distance += activity.distance
        moving_time += activity.moving_time
    return ActivitySummary(
        name="Week Overview",
        date="",
        distance=distance / reference,
        unit=UNIT_LABELS[key],
        pace=_safe_pace(reference, distance, moving_time),
        pace_unit=PACE_LABELS[key],
        moving_time=format_duration(moving_time),
    )


def compute_splits(
    activities: Sequence[Activity],
    interval: str,
    fetch_streams: StreamFetcher,
) -> List[Activity]:
    """Attach laps to each activity, skipping those that cannot be segmented.

    An activity without usable streams (manual entries, corrupt payloads) keeps
    ``laps = None`` and the rest of the batch carries on. API failures other
    than missing streams propagate.
    """

    lap_distance = lap_distance_for(interval)
    for activity in activities:
        try:
            streams = fetch_streams(activity.id)
            activity.laps = segment(streams, lap_distance)
        except (StravaStreamEmptyError, StravaResourceNotFoundError) as exc:
            LOGGER.info("Activity %s has no streams; no laps (%s)", activity.id, exc)
            activity.laps = None
        except SegmentationError as exc:
            LOGGER.warning("Activity %s cannot be segmented: %s", activity.id, exc)
            activity.laps = None
        else:
            LOGGER.debug(
                "Activity %s split into %s laps", activity.id, len(activity.laps)
            )
    return list(activities)


def laps_frame(laps: Sequence[Lap], interval: str) -> pd.DataFrame:
    """Tabulate laps with distance in the interval's unit and per-unit pace."""

    key = normalize_interval(interval)
    reference = LAP_DISTANCES[key]
    rows = [
        {
            "Lap": lap.name,
            "Distance": f"{lap.distance / reference:.2f}{UNIT_LABELS[key]}",
            "Pace": _safe_pace(reference, lap.distance, lap.moving_time),
            "Moving Time": format_duration(lap.moving_time),
        }
        for lap in laps
    ]
    return pd.DataFrame(rows, columns=LAP_COLUMNS)
