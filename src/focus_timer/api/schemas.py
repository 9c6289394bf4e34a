"""Request and response models for the timer API."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from focus_timer.domain.sessions import (
    NOTES_MAX_LENGTH,
    CompletionResult,
    SecondaryUpdateWarning,
    SessionPage,
    SessionType,
    TimerSession,
)
from focus_timer.domain.stats import StatsPeriod, StatsReport
from focus_timer.services.reconciliation import is_expired, remaining_seconds


class StartTimerRequest(BaseModel):
    """Payload for starting a session."""

    type: SessionType
    duration_minutes: int = Field(ge=1, strict=True)
    task_id: UUID | None = None
    project: str | None = None
    notes: str | None = Field(default=None, max_length=NOTES_MAX_LENGTH)


class SessionResponse(BaseModel):
    """Snapshot of a session with its remaining time at response time."""

    id: UUID
    owner_id: UUID
    type: SessionType
    duration_minutes: int
    start_time: datetime
    end_time: datetime | None = None
    completed: bool
    is_running: bool
    time_left_seconds: int | None = None
    task_id: UUID | None = None
    project: str
    notes: str | None = None
    revision: int = 0
    remaining_seconds: int
    expired: bool = False

    @classmethod
    def from_session(cls, session: TimerSession, now: datetime) -> "SessionResponse":
        """Build a snapshot, deriving remaining time from stored timestamps."""
        return cls(
            id=session.id,
            owner_id=session.owner_id,
            type=session.type,
            duration_minutes=session.duration_minutes,
            start_time=session.start_time,
            end_time=session.end_time,
            completed=session.completed,
            is_running=session.is_running,
            time_left_seconds=session.time_left_seconds,
            task_id=session.task_id,
            project=session.project,
            notes=session.notes,
            revision=session.revision,
            remaining_seconds=remaining_seconds(session, now),
            expired=is_expired(session, now),
        )

    def to_session(self) -> TimerSession:
        """Return the domain record described by this snapshot."""
        return TimerSession(
            id=self.id,
            owner_id=self.owner_id,
            type=self.type,
            duration_minutes=self.duration_minutes,
            start_time=self.start_time,
            end_time=self.end_time,
            completed=self.completed,
            is_running=self.is_running,
            time_left_seconds=self.time_left_seconds,
            task_id=self.task_id,
            project=self.project,
            notes=self.notes,
            revision=self.revision,
        )


class WarningResponse(BaseModel):
    """Non-fatal problem reported alongside a successful response."""

    code: str
    message: str


class CompletedSessionResponse(SessionResponse):
    """Completed session plus any secondary update warnings."""

    warnings: list[WarningResponse] = Field(default_factory=list)

    @classmethod
    def from_result(
        cls, result: CompletionResult, now: datetime
    ) -> "CompletedSessionResponse":
        snapshot = SessionResponse.from_session(result.session, now)
        return cls(
            **snapshot.model_dump(),
            warnings=[
                WarningResponse(code=warning.code, message=warning.message)
                for warning in result.warnings
            ],
        )

    def to_result(self) -> CompletionResult:
        """Return the domain result described by this response."""
        return CompletionResult(
            session=self.to_session(),
            warnings=[
                SecondaryUpdateWarning(code=warning.code, message=warning.message)
                for warning in self.warnings
            ],
        )


class SessionPageResponse(BaseModel):
    """Paginated session listing."""

    sessions: list[SessionResponse]
    total_pages: int
    current_page: int
    total: int

    @classmethod
    def from_page(cls, page: SessionPage, now: datetime) -> "SessionPageResponse":
        return cls(
            sessions=[
                SessionResponse.from_session(session, now) for session in page.sessions
            ],
            total_pages=page.total_pages,
            current_page=page.current_page,
            total=page.total,
        )


class TypeRollupResponse(BaseModel):
    type: SessionType
    count: int
    total_duration_minutes: int
    total_actual_minutes: float


class DailyRollupResponse(BaseModel):
    day: date
    type: SessionType
    duration_minutes: int


class StatsResponse(BaseModel):
    """Aggregated statistics for a period."""

    period: StatsPeriod
    start_date: datetime
    per_type: list[TypeRollupResponse]
    per_day: list[DailyRollupResponse]

    @classmethod
    def from_report(cls, report: StatsReport) -> "StatsResponse":
        return cls(
            period=report.period,
            start_date=report.start_date,
            per_type=[
                TypeRollupResponse(
                    type=rollup.type,
                    count=rollup.count,
                    total_duration_minutes=rollup.total_duration_minutes,
                    total_actual_minutes=round(rollup.total_actual_minutes, 2),
                )
                for rollup in report.per_type
            ],
            per_day=[
                DailyRollupResponse(
                    day=rollup.day,
                    type=rollup.type,
                    duration_minutes=rollup.duration_minutes,
                )
                for rollup in report.per_day
            ],
        )
