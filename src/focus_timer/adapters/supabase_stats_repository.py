"""Supabase repository for session statistics."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from focus_timer.adapters.supabase_query import execute, parse_timestamp
from focus_timer.domain.sessions import SessionType
from focus_timer.domain.stats import CompletedSessionRow
from focus_timer.services.stats import StatsRepository


@dataclass
class SupabaseStatsRepository(StatsRepository):
    """Supabase implementation for stats queries."""

    client: Client

    def list_completed_sessions(
        self, owner_id: UUID, since: datetime
    ) -> list[CompletedSessionRow]:
        """Return completed sessions started in the window, oldest first."""
        response = execute(
            self.client.table("timer_sessions")
            .select("type, duration_minutes, start_time, end_time")
            .eq("owner_id", str(owner_id))
            .eq("completed", True)
            .gte("start_time", since.isoformat())
            .order("start_time", desc=False),
            "load statistics",
        )
        rows = []
        for row in response.data or []:
            start_time = parse_timestamp(row.get("start_time"))
            end_time = parse_timestamp(row.get("end_time"))
            if start_time is None or end_time is None:
                continue
            rows.append(
                CompletedSessionRow(
                    type=SessionType(row["type"]),
                    duration_minutes=int(row.get("duration_minutes", 0)),
                    start_time=start_time,
                    end_time=end_time,
                )
            )
        return rows
