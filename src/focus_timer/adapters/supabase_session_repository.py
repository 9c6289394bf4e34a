"""Supabase-backed timer session repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from focus_timer.adapters.supabase_query import execute, parse_timestamp
from focus_timer.domain.errors import PersistenceError
from focus_timer.domain.sessions import (
    DEFAULT_PROJECT,
    NewSession,
    SessionFilter,
    SessionType,
    TimerSession,
)
from focus_timer.services.sessions import SessionRepository

_TABLE = "timer_sessions"
_COLUMNS = (
    "id, owner_id, type, duration_minutes, start_time, end_time, completed, "
    "is_running, time_left_seconds, task_id, project, notes, revision"
)


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for timer sessions."""

    client: Client

    def start_session(
        self, new_session: NewSession
    ) -> tuple[TimerSession, TimerSession | None]:
        """Close the active session and insert a new one in one transaction."""
        response = execute(
            self.client.rpc(
                "start_timer_session",
                {
                    "p_owner_id": str(new_session.owner_id),
                    "p_type": new_session.type.value,
                    "p_duration_minutes": new_session.duration_minutes,
                    "p_start_time": new_session.start_time.isoformat(),
                    "p_task_id": (
                        str(new_session.task_id) if new_session.task_id else None
                    ),
                    "p_project": new_session.project,
                    "p_notes": new_session.notes,
                },
            ),
            "start session",
        )
        rows = [_parse_session(row) for row in response.data or []]
        created = next((row for row in rows if not row.completed), None)
        if created is None:
            raise PersistenceError("Failed to start session")
        closed = next((row for row in rows if row.completed), None)
        return created, closed

    def get_session(self, owner_id: UUID, session_id: UUID) -> TimerSession | None:
        """Return an owned session by id, if present."""
        response = execute(
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("id", str(session_id))
            .eq("owner_id", str(owner_id))
            .limit(1),
            "load session",
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def get_active_session(self, owner_id: UUID) -> TimerSession | None:
        """Return the owner's non-completed session, if present."""
        response = execute(
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("owner_id", str(owner_id))
            .eq("completed", False)
            .order("start_time", desc=True)
            .limit(1),
            "load active session",
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

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
        """Update run state only if the row still matches the expected state."""
        response = execute(
            self.client.table(_TABLE)
            .update(
                {
                    "is_running": is_running,
                    "start_time": start_time.isoformat(),
                    "time_left_seconds": time_left_seconds,
                    "revision": expected_revision + 1,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", str(session_id))
            .eq("owner_id", str(owner_id))
            .eq("completed", False)
            .eq("is_running", expected_running)
            .eq("revision", expected_revision),
            "update session",
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def complete_session(
        self, owner_id: UUID, session_id: UUID, end_time: datetime
    ) -> TimerSession | None:
        """Mark a session completed unless it already is."""
        response = execute(
            self.client.table(_TABLE)
            .update(
                {
                    "completed": True,
                    "end_time": end_time.isoformat(),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", str(session_id))
            .eq("owner_id", str(owner_id))
            .eq("completed", False),
            "complete session",
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def list_sessions(
        self, owner_id: UUID, filters: SessionFilter, offset: int, limit: int
    ) -> tuple[list[TimerSession], int]:
        """Return a page of sessions ordered by start time descending."""
        query = (
            self.client.table(_TABLE)
            .select(_COLUMNS, count="exact")
            .eq("owner_id", str(owner_id))
        )
        if filters.type is not None:
            query = query.eq("type", filters.type.value)
        if filters.start_date is not None:
            query = query.gte("start_time", filters.start_date.isoformat())
        if filters.end_date is not None:
            query = query.lte("start_time", filters.end_date.isoformat())
        response = execute(
            query.order("start_time", desc=True).range(offset, offset + limit - 1),
            "list sessions",
        )
        sessions = [_parse_session(row) for row in response.data or []]
        total = response.count if response.count is not None else len(sessions)
        return sessions, total

    def delete_session(self, owner_id: UUID, session_id: UUID) -> bool:
        """Delete an owned session."""
        response = execute(
            self.client.table(_TABLE)
            .delete()
            .eq("id", str(session_id))
            .eq("owner_id", str(owner_id)),
            "delete session",
        )
        return bool(response.data)


def _parse_session(row: dict[str, object]) -> TimerSession:
    start_time = parse_timestamp(row.get("start_time"))
    if start_time is None:
        raise PersistenceError("Session row has no start_time")
    time_left = row.get("time_left_seconds")
    return TimerSession(
        id=UUID(str(row["id"])),
        owner_id=UUID(str(row["owner_id"])),
        type=SessionType(row["type"]),
        duration_minutes=int(row["duration_minutes"]),
        start_time=start_time,
        end_time=parse_timestamp(row.get("end_time")),
        completed=bool(row.get("completed", False)),
        is_running=bool(row.get("is_running", True)),
        time_left_seconds=int(time_left) if time_left is not None else None,
        task_id=UUID(str(row["task_id"])) if row.get("task_id") else None,
        project=str(row.get("project") or DEFAULT_PROJECT),
        notes=row.get("notes") or None,
        revision=int(row.get("revision") or 0),
    )
