from functools import partial

import pytest

from strava_splits import reports
from strava_splits.errors import StravaAPIError, StravaStreamEmptyError
from strava_splits.models import Activity, Lap, StreamSeries, TelemetryStream

from strava_splits.strava_client import get_streams

from conftest import FakeClient, json_response, make_streams


def _activity(activity_id, distance=3000.0, moving_time=900):
    return Activity(
        id=activity_id,
        name=f"Run {activity_id}",
        distance=distance,
        moving_time=moving_time,
        start_date_local="2023-11-08T07:30:00Z",
    )


def test_lap_distance_for_interval_names():
    assert reports.lap_distance_for("mile") == 1609.34
    assert reports.lap_distance_for("1K") == 1000.0
    with pytest.raises(ValueError):
        reports.lap_distance_for("marathon")


def test_summarize_activity_per_kilometre():
    summary = reports.summarize_activity(_activity(1, 5000.0, 1500), "1k")
    assert summary.date == "11-08-2023"
    assert summary.distance == pytest.approx(5.0)
    assert summary.pace == "5:00"
    assert summary.moving_time == "25:00"
    assert summary.render().splitlines() == [
        "Run 1",
        "Date: 11-08-2023",
        "Distance: 5.00K",
        "Pace: 5:00 min/k",
        "Moving Time: 25:00",
    ]


def test_summarize_activity_zero_distance_has_no_pace():
    summary = reports.summarize_activity(_activity(1, 0.0, 600), "mile")
    assert summary.pace == "-"


def test_summarize_week_totals():
    week = reports.summarize_week(
        [_activity(1, 5000.0, 1500), _activity(2, 5000.0, 1800)], "1k"
    )
    assert week.distance == pytest.approx(10.0)
    assert week.pace == "5:30"
    assert week.moving_time == "55:00"
    assert week.render().startswith("Week Overview\nDistance: 10.00K")


def test_compute_splits_continues_past_activities_without_streams():
    good = make_streams(
        [0, 500, 1000, 1500], [0, 300, 600, 900], [True, True, True, True]
    )
    corrupt = TelemetryStream(
        distance=StreamSeries([0, 1], 2),
        time=StreamSeries([0], 1),
        moving=StreamSeries([True, True], 2),
    )

    def fetch(activity_id):
        if activity_id == 2:
            raise StravaStreamEmptyError("manual activity")
        if activity_id == 3:
            return corrupt
        return good

    activities = [_activity(1), _activity(2), _activity(3), _activity(4)]
    result = reports.compute_splits(activities, "1k", fetch)

    assert [a.laps is None for a in result] == [False, True, True, False]
    assert result[0].laps == [
        Lap(name="Lap 1", distance=1000, moving_time=600),
        Lap(name="Lap 2", distance=500, moving_time=300),
    ]


def test_compute_splits_skips_malformed_stream_payload():
    malformed = {
        "distance": {"data": [0, 500], "original_size": None},
        "time": {"data": [0, 300], "original_size": 2},
        "moving": {"data": [True, True], "original_size": 2},
    }
    valid = {
        "distance": {"data": [0, 500, 1000, 1500], "original_size": 4},
        "time": {"data": [0, 300, 600, 900], "original_size": 4},
        "moving": {"data": [True, True, True, True], "original_size": 4},
    }
    client = FakeClient(json_response(200, malformed), json_response(200, valid))

    activities = [_activity(1), _activity(2)]
    reports.compute_splits(activities, "1k", partial(get_streams, client, "tok"))

    assert activities[0].laps is None
    assert activities[1].laps == [
        Lap(name="Lap 1", distance=1000, moving_time=600),
        Lap(name="Lap 2", distance=500, moving_time=300),
    ]


def test_compute_splits_propagates_api_failures():
    def fetch(activity_id):
        raise StravaAPIError("server error")

    with pytest.raises(StravaAPIError):
        reports.compute_splits([_activity(1)], "mile", fetch)


def test_laps_frame_formats_rows():
    laps = [
        Lap(name="Lap 1", distance=1000.0, moving_time=300),
        Lap(name="Lap 2", distance=0.0, moving_time=0),
    ]
    frame = reports.laps_frame(laps, "1k")
    assert list(frame.columns) == ["Lap", "Distance", "Pace", "Moving Time"]
    assert frame.iloc[0].tolist() == ["Lap 1", "1.00K", "5:00", "5:00"]
    assert frame.iloc[1]["Pace"] == "-"


def test_laps_frame_empty():
    frame = reports.laps_frame([], "mile")
    assert frame.empty
    assert list(frame.columns) == reports.LAP_COLUMNS
