"""Statistics service for completed timer sessions."""

import calendar
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from focus_timer.domain.errors import ValidationError
from focus_timer.domain.sessions import SessionType
from focus_timer.domain.stats import (
    CompletedSessionRow,
    DailyTypeRollup,
    StatsPeriod,
    StatsReport,
    TypeRollup,
)
from focus_timer.services.reconciliation import actual_duration_minutes

_TYPE_ORDER = {session_type: index for index, session_type in enumerate(SessionType)}


class StatsRepository(Protocol):
    """Persistence interface for session statistics."""

    def list_completed_sessions(
        self, owner_id: UUID, since: datetime
    ) -> list[CompletedSessionRow]:
        """Return completed sessions that started at or after ``since``."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class StatsService:
    """Service for rolling up completed sessions by type and day."""

    repository: StatsRepository
    default_timezone: str = "UTC"
    clock: Callable[[], datetime] = field(default=_utc_now)

    def get_stats(
        self,
        owner_id: UUID,
        period: StatsPeriod | str = StatsPeriod.WEEK,
        timezone_name: str | None = None,
    ) -> StatsReport:
        """Return per-type and per-day rollups for the period."""
        resolved_period = _parse_period(period)
        tz = _parse_timezone(timezone_name or self.default_timezone)
        start = period_start(resolved_period, self.clock().astimezone(tz))
        rows = [
            row
            for row in self.repository.list_completed_sessions(
                owner_id, start.astimezone(UTC)
            )
            if row.start_time >= start
        ]
        return StatsReport(
            period=resolved_period,
            start_date=start,
            per_type=_rollup_by_type(rows),
            per_day=_rollup_by_day(rows, tz),
        )


def period_start(period: StatsPeriod, now: datetime) -> datetime:
    """Return the lower bound instant of a reporting window ending at ``now``."""
    if period is StatsPeriod.DAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period is StatsPeriod.WEEK:
        return now - timedelta(days=7)
    if period is StatsPeriod.MONTH:
        return _shift_months(now, -1)
    return _shift_months(now, -12)


def _shift_months(value: datetime, months: int) -> datetime:
    index = value.year * 12 + value.month - 1 + months
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _parse_period(period: StatsPeriod | str) -> StatsPeriod:
    try:
        return StatsPeriod(period)
    except ValueError as exc:
        raise ValidationError(f"Invalid period: {period!r}") from exc


def _parse_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"Invalid timezone: {name!r}") from exc


def _rollup_by_type(rows: list[CompletedSessionRow]) -> list[TypeRollup]:
    counts: dict[SessionType, int] = defaultdict(int)
    nominal: dict[SessionType, int] = defaultdict(int)
    actual: dict[SessionType, float] = defaultdict(float)
    for row in rows:
        counts[row.type] += 1
        nominal[row.type] += row.duration_minutes
        actual[row.type] += actual_duration_minutes(row.start_time, row.end_time)
    return [
        TypeRollup(
            type=session_type,
            count=counts[session_type],
            total_duration_minutes=nominal[session_type],
            total_actual_minutes=actual[session_type],
        )
        for session_type in sorted(counts, key=_TYPE_ORDER.__getitem__)
    ]


def _rollup_by_day(
    rows: list[CompletedSessionRow], tz: ZoneInfo
) -> list[DailyTypeRollup]:
    totals: dict[tuple[date, SessionType], int] = defaultdict(int)
    for row in rows:
        day = row.start_time.astimezone(tz).date()
        totals[(day, row.type)] += row.duration_minutes
    ordered = sorted(totals, key=lambda key: (key[0], _TYPE_ORDER[key[1]]))
    return [
        DailyTypeRollup(
            day=day,
            type=session_type,
            duration_minutes=totals[(day, session_type)],
        )
        for day, session_type in ordered
    ]
