"""Domain models for timer sessions."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

DEFAULT_PROJECT = "No Project"
NOTES_MAX_LENGTH = 500


class SessionType(str, Enum):
    """Kinds of timed intervals."""

    FOCUS = "focus"
    SHORT_BREAK = "shortBreak"
    LONG_BREAK = "longBreak"


DEFAULT_DURATION_MINUTES: dict[SessionType, int] = {
    SessionType.FOCUS: 25,
    SessionType.SHORT_BREAK: 5,
    SessionType.LONG_BREAK: 15,
}


@dataclass(frozen=True)
class TimerSession:
    """Represents a persisted focus or break interval.

    While ``is_running`` is true the remaining time is derived from
    ``start_time``; ``time_left_seconds`` only holds while paused.
    """

    id: UUID
    owner_id: UUID
    type: SessionType
    duration_minutes: int
    start_time: datetime
    end_time: datetime | None = None
    completed: bool = False
    is_running: bool = True
    time_left_seconds: int | None = None
    task_id: UUID | None = None
    project: str = DEFAULT_PROJECT
    notes: str | None = None
    revision: int = 0

    @property
    def duration_seconds(self) -> int:
        """Nominal length in seconds."""
        return self.duration_minutes * 60

    @property
    def is_paused(self) -> bool:
        return not self.completed and not self.is_running


@dataclass(frozen=True)
class NewSession:
    """Validated input for creating a session."""

    owner_id: UUID
    type: SessionType
    duration_minutes: int
    start_time: datetime
    task_id: UUID | None = None
    project: str = DEFAULT_PROJECT
    notes: str | None = None


@dataclass(frozen=True)
class SessionFilter:
    """Filters for listing an owner's sessions."""

    type: SessionType | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


@dataclass(frozen=True)
class SessionPage:
    """A page of sessions, newest first."""

    sessions: list[TimerSession]
    total_pages: int
    current_page: int
    total: int


@dataclass(frozen=True)
class SecondaryUpdateWarning:
    """A side effect that failed after a committed completion."""

    code: str
    message: str


@dataclass(frozen=True)
class CompletionResult:
    """Outcome of completing a session."""

    session: TimerSession
    warnings: list[SecondaryUpdateWarning] = field(default_factory=list)
