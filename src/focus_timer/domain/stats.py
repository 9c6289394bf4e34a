"""Domain models for statistics."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from focus_timer.domain.sessions import SessionType


class StatsPeriod(str, Enum):
    """Supported reporting windows."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class CompletedSessionRow:
    """Fields of a completed session needed for aggregation."""

    type: SessionType
    duration_minutes: int
    start_time: datetime
    end_time: datetime


@dataclass(frozen=True)
class TypeRollup:
    """Totals for one session type."""

    type: SessionType
    count: int
    total_duration_minutes: int
    total_actual_minutes: float


@dataclass(frozen=True)
class DailyTypeRollup:
    """Nominal minutes for one type on one calendar day."""

    day: date
    type: SessionType
    duration_minutes: int


@dataclass(frozen=True)
class StatsReport:
    """Aggregated statistics for a period."""

    period: StatsPeriod
    start_date: datetime
    per_type: list[TypeRollup]
    per_day: list[DailyTypeRollup]
