from datetime import timedelta

import pytest

from src.timeclock.timeclock.common.datetime_utils import format_hms
from src.timeclock.timeclock.core.enums import TrackerStatus
from src.timeclock.timeclock.tracker.timer import (
    RingProgress,
    countdown_remaining,
    pending_snapshot,
    ring_progress,
    running_snapshot,
    stopped_snapshot,
)


def test_format_hms_is_zero_padded():
    assert format_hms(0) == "00:00:00"
    assert format_hms(3661) == "01:01:01"
    assert format_hms(36000 + 59) == "10:00:59"


@pytest.mark.parametrize(
    "elapsed,expected",
    [
        (0, RingProgress(0.0, 0.0)),
        (14400, RingProgress(0.5, 0.0)),
        (28800 + 14400, RingProgress(1.0, 0.5)),
        (28800 * 3, RingProgress(1.0, 1.0)),
    ],
)
def test_ring_progress_fills_primary_then_overtime(elapsed, expected):
    assert ring_progress(elapsed) == expected


def test_dash_offsets_follow_ring_circumference():
    assert RingProgress(0.5, 0.0).dash_offsets() == (345.5, 691.0)
    assert RingProgress(1.0, 1.0).dash_offsets() == (0.0, 0.0)


def test_running_snapshot_counts_from_clock_in(fixed_now):
    snap = running_snapshot(fixed_now, fixed_now + timedelta(hours=1, minutes=2, seconds=3))

    assert snap.status is TrackerStatus.IN
    assert snap.elapsed_seconds == 3723
    assert snap.elapsed_label == "01:02:03"
    assert snap.countdown_remaining is None


def test_running_snapshot_never_goes_negative(fixed_now):
    assert running_snapshot(fixed_now, fixed_now - timedelta(seconds=5)).elapsed_seconds == 0


def test_countdown_rounds_up_and_stops_at_zero(fixed_now):
    deadline = fixed_now + timedelta(seconds=10)

    assert countdown_remaining(deadline, fixed_now) == 10
    assert countdown_remaining(deadline, deadline - timedelta(milliseconds=500)) == 1
    assert countdown_remaining(deadline, deadline) == 0
    assert countdown_remaining(deadline, deadline + timedelta(seconds=3)) == 0


def test_pending_snapshot_shows_stopped_timer_and_countdown(fixed_now):
    deadline = fixed_now + timedelta(seconds=10)

    snap = pending_snapshot(deadline, fixed_now + timedelta(seconds=3), grace_seconds=10)

    assert snap.status is TrackerStatus.PENDING_OUT
    assert snap.elapsed_label == "00:00:00"
    assert snap.countdown_remaining == 7
    assert snap.countdown_fraction == pytest.approx(0.7)


def test_stopped_snapshot_serializes_for_the_ui():
    data = stopped_snapshot().to_dict()

    assert data["status"] == "out"
    assert data["elapsed"] == "00:00:00"
    assert data["ring_primary_offset"] == 691
    assert data["countdown_remaining"] is None
