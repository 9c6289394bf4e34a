"""Shared test fixtures."""

import threading
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from focus_timer.config import Settings
from focus_timer.containers import AppContainer
from focus_timer.domain.sessions import (
    NewSession,
    SessionFilter,
    SessionType,
    TimerSession,
)
from focus_timer.domain.stats import CompletedSessionRow
from focus_timer.services.sessions import SessionRepository, SessionService
from focus_timer.services.stats import StatsRepository, StatsService
from focus_timer.services.tasks import TaskRepository

START = datetime(2024, 3, 4, 9, 0, tzinfo=UTC)


@dataclass
class FakeClock:
    """Manually advanced UTC clock."""

    now: datetime = START

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@dataclass
class InMemorySessionRepository(SessionRepository):
    """In-memory session repository with atomic conditional updates."""

    sessions: dict[UUID, TimerSession] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def start_session(
        self, new_session: NewSession
    ) -> tuple[TimerSession, TimerSession | None]:
        with self.lock:
            closed = None
            for session in list(self.sessions.values()):
                if session.owner_id == new_session.owner_id and not session.completed:
                    closed = replace(
                        session, completed=True, end_time=new_session.start_time
                    )
                    self.sessions[session.id] = closed
            created = TimerSession(
                id=uuid4(),
                owner_id=new_session.owner_id,
                type=new_session.type,
                duration_minutes=new_session.duration_minutes,
                start_time=new_session.start_time,
                task_id=new_session.task_id,
                project=new_session.project,
                notes=new_session.notes,
            )
            self.sessions[created.id] = created
            return created, closed

    def get_session(self, owner_id: UUID, session_id: UUID) -> TimerSession | None:
        session = self.sessions.get(session_id)
        if session is None or session.owner_id != owner_id:
            return None
        return session

    def get_active_session(self, owner_id: UUID) -> TimerSession | None:
        for session in self.sessions.values():
            if session.owner_id == owner_id and not session.completed:
                return session
        return None

    def update_run_state(  # noqa: PLR0913
        self,
        owner_id: UUID,
        session_id: UUID,
        expected_running: bool,
        expected_revision: int,
        is_running: bool,
        start_time: datetime,
        time_left_seconds: int | None,
    ) -> TimerSession | None:
        with self.lock:
            session = self.get_session(owner_id, session_id)
            if (
                session is None
                or session.completed
                or session.is_running != expected_running
                or session.revision != expected_revision
            ):
                return None
            updated = replace(
                session,
                is_running=is_running,
                start_time=start_time,
                time_left_seconds=time_left_seconds,
                revision=expected_revision + 1,
            )
            self.sessions[session_id] = updated
            return updated

    def complete_session(
        self, owner_id: UUID, session_id: UUID, end_time: datetime
    ) -> TimerSession | None:
        with self.lock:
            session = self.get_session(owner_id, session_id)
            if session is None or session.completed:
                return None
            completed = replace(session, completed=True, end_time=end_time)
            self.sessions[session_id] = completed
            return completed

    def list_sessions(
        self, owner_id: UUID, filters: SessionFilter, offset: int, limit: int
    ) -> tuple[list[TimerSession], int]:
        matches = [
            session
            for session in self.sessions.values()
            if session.owner_id == owner_id
            and (filters.type is None or session.type is filters.type)
            and (filters.start_date is None or session.start_time >= filters.start_date)
            and (filters.end_date is None or session.start_time <= filters.end_date)
        ]
        matches.sort(key=lambda session: session.start_time, reverse=True)
        return matches[offset : offset + limit], len(matches)

    def delete_session(self, owner_id: UUID, session_id: UUID) -> bool:
        if self.get_session(owner_id, session_id) is None:
            return False
        del self.sessions[session_id]
        return True

    def active_count(self, owner_id: UUID) -> int:
        return sum(
            1
            for session in self.sessions.values()
            if session.owner_id == owner_id and not session.completed
        )


@dataclass
class InMemoryStatsRepository(StatsRepository):
    """Stats repository reading from an in-memory session repository."""

    sessions: InMemorySessionRepository

    def list_completed_sessions(
        self, owner_id: UUID, since: datetime
    ) -> list[CompletedSessionRow]:
        rows = [
            CompletedSessionRow(
                type=session.type,
                duration_minutes=session.duration_minutes,
                start_time=session.start_time,
                end_time=session.end_time,
            )
            for session in self.sessions.sessions.values()
            if session.owner_id == owner_id
            and session.completed
            and session.end_time is not None
            and session.start_time >= since
        ]
        return sorted(rows, key=lambda row: row.start_time)


@dataclass
class InMemoryTaskRepository(TaskRepository):
    """Task counter that records increments and can be made to fail."""

    counts: dict[UUID, int] = field(default_factory=dict)
    fail: bool = False

    def increment_completed_intervals(self, task_id: UUID) -> None:
        if self.fail:
            raise RuntimeError("tasks table unavailable")
        self.counts[task_id] = self.counts.get(task_id, 0) + 1


def completed_session(  # noqa: PLR0913
    owner_id: UUID,
    session_type: SessionType,
    start_time: datetime,
    duration_minutes: int = 25,
    actual_minutes: float | None = None,
    completed: bool = True,
) -> TimerSession:
    """Build a session row for seeding repositories."""
    minutes = duration_minutes if actual_minutes is None else actual_minutes
    return TimerSession(
        id=uuid4(),
        owner_id=owner_id,
        type=session_type,
        duration_minutes=duration_minutes,
        start_time=start_time,
        end_time=start_time + timedelta(minutes=minutes) if completed else None,
        completed=completed,
        is_running=not completed,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        api_token="api-token",
        environment="test",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def owner_id() -> UUID:
    return uuid4()


@pytest.fixture
def session_repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def task_repository() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture
def session_service(
    session_repository: InMemorySessionRepository,
    task_repository: InMemoryTaskRepository,
    clock: FakeClock,
) -> SessionService:
    return SessionService(
        session_repository=session_repository,
        task_repository=task_repository,
        clock=clock,
    )


@pytest.fixture
def stats_service(
    session_repository: InMemorySessionRepository, clock: FakeClock
) -> StatsService:
    return StatsService(InMemoryStatsRepository(session_repository), clock=clock)


@pytest.fixture
def container(
    settings: Settings,
    session_service: SessionService,
    stats_service: StatsService,
) -> AppContainer:
    return AppContainer(
        settings=settings,
        session_service=session_service,
        stats_service=stats_service,
    )
