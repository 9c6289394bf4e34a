"""Session state machine for focus and break timers."""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from focus_timer.domain.errors import (
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from focus_timer.domain.sessions import (
    DEFAULT_PROJECT,
    NOTES_MAX_LENGTH,
    CompletionResult,
    NewSession,
    SecondaryUpdateWarning,
    SessionFilter,
    SessionPage,
    SessionType,
    TimerSession,
)
from focus_timer.services.reconciliation import (
    paused_time_left,
    remaining_from_running,
    synthetic_start_from_pause,
)
from focus_timer.services.tasks import TaskRepository

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class SessionRepository(Protocol):
    """Persistence interface for timer sessions.

    Every method is scoped to one owner. Mutating methods are conditional and
    return None when the stored row no longer matches the expected state.
    """

    def start_session(
        self, new_session: NewSession
    ) -> tuple[TimerSession, TimerSession | None]:
        """Close the owner's active session and create a new one atomically.

        Returns the created session and the closed one, if any.
        """

    def get_session(self, owner_id: UUID, session_id: UUID) -> TimerSession | None:
        """Return an owned session by id, if present."""

    def get_active_session(self, owner_id: UUID) -> TimerSession | None:
        """Return the owner's non-completed session, if present."""

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
        """Compare-and-set the run state of an active session."""

    def complete_session(
        self, owner_id: UUID, session_id: UUID, end_time: datetime
    ) -> TimerSession | None:
        """Mark a non-completed session completed and return it."""

    def list_sessions(
        self, owner_id: UUID, filters: SessionFilter, offset: int, limit: int
    ) -> tuple[list[TimerSession], int]:
        """Return a page of sessions (newest first) and the total match count."""

    def delete_session(self, owner_id: UUID, session_id: UUID) -> bool:
        """Delete an owned session; return False when nothing matched."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SessionService:
    """State machine for an owner's timer sessions."""

    session_repository: SessionRepository
    task_repository: TaskRepository
    default_project: str = DEFAULT_PROJECT
    max_page_size: int = MAX_PAGE_SIZE
    clock: Callable[[], datetime] = field(default=_utc_now)

    def start(  # noqa: PLR0913
        self,
        owner_id: UUID,
        session_type: SessionType | str,
        duration_minutes: int,
        task_id: UUID | None = None,
        project: str | None = None,
        notes: str | None = None,
    ) -> TimerSession:
        """Start a running session, closing any session left active."""
        new_session = NewSession(
            owner_id=owner_id,
            type=_parse_type(session_type),
            duration_minutes=_parse_duration(duration_minutes),
            start_time=self.clock(),
            task_id=task_id,
            project=_clean_project(project) or self.default_project,
            notes=_clean_notes(notes),
        )
        session, closed = self.session_repository.start_session(new_session)
        if closed is not None:
            logger.info(
                "Closed active session before starting a new one",
                extra={"owner_id": str(owner_id), "session_id": str(closed.id)},
            )
        return session

    def pause(self, owner_id: UUID) -> TimerSession:
        """Pause the running session and store its remaining time."""
        session = self._require_active(owner_id)
        if not session.is_running:
            raise StateConflictError("Timer is already paused")
        now = self.clock()
        time_left = remaining_from_running(
            session.start_time, session.duration_minutes, now
        )
        updated = self.session_repository.update_run_state(
            owner_id,
            session.id,
            expected_running=True,
            expected_revision=session.revision,
            is_running=False,
            start_time=session.start_time,
            time_left_seconds=time_left,
        )
        if updated is None:
            raise StateConflictError("Session changed while pausing")
        return updated

    def resume(self, owner_id: UUID) -> TimerSession:
        """Resume the paused session from its stored remaining time."""
        session = self._require_active(owner_id)
        if session.is_running:
            raise StateConflictError("Timer is already running")
        now = self.clock()
        start_time = synthetic_start_from_pause(
            paused_time_left(session), session.duration_minutes, now
        )
        updated = self.session_repository.update_run_state(
            owner_id,
            session.id,
            expected_running=False,
            expected_revision=session.revision,
            is_running=True,
            start_time=start_time,
            time_left_seconds=None,
        )
        if updated is None:
            raise StateConflictError("Session changed while resuming")
        return updated

    def complete(self, owner_id: UUID, session_id: UUID) -> CompletionResult:
        """Complete a session and credit its linked task."""
        session = self.session_repository.complete_session(
            owner_id, session_id, end_time=self.clock()
        )
        if session is None:
            existing = self.session_repository.get_session(owner_id, session_id)
            if existing is None:
                raise NotFoundError("Timer session not found")
            raise StateConflictError("Timer session is already completed")

        warnings: list[SecondaryUpdateWarning] = []
        if session.type is SessionType.FOCUS and session.task_id is not None:
            try:
                self.task_repository.increment_completed_intervals(session.task_id)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "Failed to credit task for completed session",
                    extra={
                        "session_id": str(session.id),
                        "task_id": str(session.task_id),
                        "error": repr(exc),
                    },
                )
                warnings.append(
                    SecondaryUpdateWarning(
                        code="task_update_failed",
                        message="Session completed but the task was not updated.",
                    )
                )
        return CompletionResult(session=session, warnings=warnings)

    def get_active(self, owner_id: UUID) -> TimerSession | None:
        """Return the owner's active session, if any."""
        return self.session_repository.get_active_session(owner_id)

    def list_sessions(  # noqa: PLR0913
        self,
        owner_id: UUID,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        session_type: SessionType | str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> SessionPage:
        """Return one page of the owner's sessions, newest first."""
        if page < 1:
            raise ValidationError("Page must be a positive integer")
        if not 1 <= limit <= self.max_page_size:
            raise ValidationError(
                f"Limit must be between 1 and {self.max_page_size}"
            )
        start_date = _as_utc(start_date)
        end_date = _as_utc(end_date)
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must not be after end_date")
        filters = SessionFilter(
            type=_parse_type(session_type) if session_type is not None else None,
            start_date=start_date,
            end_date=end_date,
        )
        sessions, total = self.session_repository.list_sessions(
            owner_id, filters, offset=(page - 1) * limit, limit=limit
        )
        return SessionPage(
            sessions=sessions,
            total_pages=math.ceil(total / limit),
            current_page=page,
            total=total,
        )

    def delete_session(self, owner_id: UUID, session_id: UUID) -> None:
        """Delete one of the owner's sessions."""
        if not self.session_repository.delete_session(owner_id, session_id):
            raise NotFoundError("Timer session not found")

    def _require_active(self, owner_id: UUID) -> TimerSession:
        session = self.session_repository.get_active_session(owner_id)
        if session is None:
            raise NotFoundError("No active session found")
        return session


def _parse_type(value: SessionType | str) -> SessionType:
    try:
        return SessionType(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid timer type: {value!r}") from exc


def _parse_duration(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError("Duration must be a positive integer")
    return value


def _as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _clean_project(project: str | None) -> str | None:
    if project is None:
        return None
    return project.strip() or None


def _clean_notes(notes: str | None) -> str | None:
    if notes is None:
        return None
    cleaned = notes.strip()
    if len(cleaned) > NOTES_MAX_LENGTH:
        raise ValidationError(f"Notes must be at most {NOTES_MAX_LENGTH} characters")
    return cleaned or None
