"""Tests for time reconciliation helpers."""

from datetime import timedelta
from uuid import uuid4

import pytest

from focus_timer.domain.sessions import SessionType, TimerSession
from focus_timer.services.reconciliation import (
    actual_duration_minutes,
    elapsed_seconds,
    format_clock,
    is_expired,
    remaining_from_running,
    remaining_seconds,
    synthetic_start_from_pause,
)
from tests.conftest import START


@pytest.mark.parametrize("elapsed", [0, 1, 59, 600, 1499, 1500])
def test_remaining_from_running_counts_down(elapsed: int) -> None:
    now = START + timedelta(seconds=elapsed)
    assert remaining_from_running(START, 25, now) == 1500 - elapsed


@pytest.mark.parametrize("elapsed", [1500, 1501, 86400])
def test_remaining_from_running_clamps_to_zero(elapsed: int) -> None:
    now = START + timedelta(seconds=elapsed)
    assert remaining_from_running(START, 25, now) == 0


def test_remaining_from_running_floors_partial_seconds() -> None:
    now = START + timedelta(seconds=10, milliseconds=999)
    assert elapsed_seconds(START, now) == 10
    assert remaining_from_running(START, 1, now) == 50


def test_remaining_from_running_never_exceeds_duration() -> None:
    before_start = START - timedelta(seconds=30)
    assert remaining_from_running(START, 5, before_start) == 300


def test_synthetic_start_restores_remaining_time() -> None:
    now = START + timedelta(hours=3)
    start = synthetic_start_from_pause(900, 25, now)

    assert start == now - timedelta(seconds=600)
    assert remaining_from_running(start, 25, now) == 900


def _session(**overrides) -> TimerSession:  # type: ignore[no-untyped-def]
    values = {
        "id": uuid4(),
        "owner_id": uuid4(),
        "type": SessionType.FOCUS,
        "duration_minutes": 25,
        "start_time": START,
    }
    values.update(overrides)
    return TimerSession(**values)


def test_remaining_seconds_for_paused_session_uses_time_left() -> None:
    session = _session(is_running=False, time_left_seconds=321)
    later = START + timedelta(days=2)

    assert remaining_seconds(session, later) == 321
    assert not is_expired(session, later)


def test_remaining_seconds_for_paused_session_without_time_left() -> None:
    session = _session(is_running=False, time_left_seconds=None)
    assert remaining_seconds(session, START) == 1500


def test_remaining_seconds_for_completed_session_is_zero() -> None:
    session = _session(completed=True, end_time=START)
    assert remaining_seconds(session, START) == 0
    assert not is_expired(session, START)


def test_running_session_past_duration_is_expired() -> None:
    session = _session(duration_minutes=5)
    assert is_expired(session, START + timedelta(minutes=6))
    assert not is_expired(session, START + timedelta(minutes=4))


def test_actual_duration_minutes() -> None:
    end = START + timedelta(minutes=12, seconds=30)
    assert actual_duration_minutes(START, end) == 12.5


def test_format_clock() -> None:
    assert format_clock(1500) == "25:00"
    assert format_clock(61) == "01:01"
    assert format_clock(-5) == "00:00"
