import pytest

from strava_splits.errors import CorruptStreamsError, InvalidLapDistanceError
from strava_splits.models import Lap, StreamSeries, TelemetryStream
from strava_splits.splits import calc_moving_time, segment

from conftest import make_streams


def test_segment_full_lap_and_trailing_fragment():
    streams = make_streams(
        [0, 500, 1000, 1500], [0, 300, 600, 900], [True, True, True, True]
    )
    laps = segment(streams, 1000)
    assert laps == [
        Lap(name="Lap 1", distance=1000, moving_time=600),
        Lap(name="Lap 2", distance=500, moving_time=300),
    ]


def test_segment_drops_fragment_below_ten_percent():
    streams = make_streams(
        [0, 500, 1000, 1050], [0, 300, 600, 630], [True, True, True, True]
    )
    laps = segment(streams, 1000)
    assert [lap.name for lap in laps] == ["Lap 1"]
    assert laps[0].distance == 1000


def test_segment_keeps_fragment_at_exactly_ten_percent():
    streams = make_streams([0, 1000, 1100], [0, 600, 660], [True, True, True])
    laps = segment(streams, 1000)
    assert [lap.distance for lap in laps] == [1000, 100]
    assert laps[1].moving_time == 60


def test_segment_short_activity_is_single_partial_lap():
    streams = make_streams([0, 200, 400], [0, 60, 120], [True, True, True])
    laps = segment(streams, 1609.34)
    assert laps == [Lap(name="Lap 1", distance=400, moving_time=120)]


def test_segment_laps_sum_to_total_distance():
    distance = [i * 37.5 for i in range(200)]
    time = [i * 10 for i in range(200)]
    streams = make_streams(distance, time, [True] * 200)
    laps = segment(streams, 1000)
    total = sum(lap.distance for lap in laps)
    assert total == pytest.approx(distance[-1] - distance[0])
    assert [lap.name for lap in laps][:3] == ["Lap 1", "Lap 2", "Lap 3"]


def test_segment_all_moving_moving_time_equals_elapsed():
    distance = [0, 400, 800, 1200, 1600, 2000, 2300]
    time = [0, 100, 210, 300, 420, 500, 580]
    streams = make_streams(distance, time, [True] * len(distance))
    laps = segment(streams, 1000)
    assert [lap.moving_time for lap in laps] == [300, 200, 80]
    assert sum(lap.moving_time for lap in laps) == time[-1] - time[0]


def test_segment_subtracts_paused_time():
    # Paused between t=300 and t=500 at the 500m mark.
    streams = make_streams(
        [0, 500, 500, 1000, 1500],
        [0, 300, 500, 800, 1100],
        [True, True, False, True, True],
    )
    laps = segment(streams, 1000)
    assert laps[0].moving_time == 800 - 200
    assert laps[1] == Lap(name="Lap 2", distance=500, moving_time=300)


def test_segment_empty_streams_returns_no_laps():
    assert segment(make_streams([], [], []), 1000) == []


@pytest.mark.parametrize("lap_distance", [0, -1000, float("nan")])
def test_segment_rejects_non_positive_lap_distance(lap_distance):
    streams = make_streams([0, 500], [0, 300], [True, True])
    with pytest.raises(InvalidLapDistanceError):
        segment(streams, lap_distance)


def test_segment_rejects_mismatched_original_size():
    streams = TelemetryStream(
        distance=StreamSeries([0, 500, 1000], original_size=3),
        time=StreamSeries([0, 300, 600], original_size=4),
        moving=StreamSeries([True, True, True], original_size=3),
    )
    with pytest.raises(CorruptStreamsError):
        segment(streams, 1000)


def test_segment_rejects_mismatched_data_length():
    streams = TelemetryStream(
        distance=StreamSeries([0, 500, 1000], original_size=3),
        time=StreamSeries([0, 300], original_size=3),
        moving=StreamSeries([True, True, True], original_size=3),
    )
    with pytest.raises(CorruptStreamsError):
        segment(streams, 1000)


def test_moving_time_first_stop_measured_from_time_zero():
    # A range opening on a stationary sample counts its gap from t=0.
    streams = make_streams([0, 0, 10, 20], [100, 110, 120, 130], [False] * 4)
    assert calc_moving_time(1, 1, streams) == 0 - 110
    assert calc_moving_time(0, 0, streams) == -100


def test_moving_time_all_stationary_from_origin_is_zero():
    streams = make_streams([0, 0], [0, 0], [False, False])
    assert calc_moving_time(0, 1, streams) == 0


def test_moving_time_stop_after_movement_uses_last_moving_sample():
    streams = make_streams(
        [0, 100, 100, 100, 200],
        [0, 30, 40, 60, 90],
        [True, True, False, False, True],
    )
    # stopped: (40 - 30) + (60 - 30) = 40
    assert calc_moving_time(0, 4, streams) == 90 - 40
