"""Conversions between stored timestamps and remaining time.

Every remaining/elapsed computation in the service and the client goes
through these functions so repeated pause/resume cycles never drift.
"""

import math
from datetime import datetime, timedelta

from focus_timer.domain.sessions import TimerSession

SECONDS_PER_MINUTE = 60


def elapsed_seconds(start_time: datetime, now: datetime) -> int:
    """Return whole seconds elapsed since ``start_time`` (floored)."""
    return math.floor((now - start_time).total_seconds())


def remaining_from_running(
    start_time: datetime, duration_minutes: int, now: datetime
) -> int:
    """Return remaining seconds of a running session, clamped to the duration."""
    total = duration_minutes * SECONDS_PER_MINUTE
    remaining = total - elapsed_seconds(start_time, now)
    return max(0, min(total, remaining))


def synthetic_start_from_pause(
    time_left_seconds: int, duration_minutes: int, now: datetime
) -> datetime:
    """Return the start instant that makes ``time_left_seconds`` remain at ``now``."""
    elapsed_before_pause = duration_minutes * SECONDS_PER_MINUTE - time_left_seconds
    return now - timedelta(seconds=elapsed_before_pause)


def paused_time_left(session: TimerSession) -> int:
    """Return the stored time left of a paused session, full duration if unset."""
    total = session.duration_seconds
    if session.time_left_seconds is None:
        return total
    return max(0, min(total, session.time_left_seconds))


def remaining_seconds(session: TimerSession, now: datetime) -> int:
    """Return the remaining seconds for a session in any state."""
    if session.completed:
        return 0
    if session.is_running:
        return remaining_from_running(
            session.start_time, session.duration_minutes, now
        )
    return paused_time_left(session)


def is_expired(session: TimerSession, now: datetime) -> bool:
    """Return True for a running session whose countdown already reached zero."""
    return (
        not session.completed
        and session.is_running
        and remaining_seconds(session, now) == 0
    )


def actual_duration_minutes(start_time: datetime, end_time: datetime) -> float:
    """Return the wall-clock span between start and end in minutes."""
    return (end_time - start_time).total_seconds() / SECONDS_PER_MINUTE


def format_clock(seconds: int) -> str:
    """Format seconds as MM:SS."""
    seconds = max(0, seconds)
    minutes, secs = divmod(seconds, SECONDS_PER_MINUTE)
    return f"{minutes:02d}:{secs:02d}"
