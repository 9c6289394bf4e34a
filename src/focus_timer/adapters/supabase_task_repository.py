"""Supabase-backed task counter."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from focus_timer.adapters.supabase_query import execute
from focus_timer.services.tasks import TaskRepository


@dataclass
class SupabaseTaskRepository(TaskRepository):
    """Supabase implementation of the task collaborator."""

    client: Client

    def increment_completed_intervals(self, task_id: UUID) -> None:
        """Atomically increment the task's completed interval counter."""
        execute(
            self.client.rpc(
                "increment_task_completed_intervals", {"p_task_id": str(task_id)}
            ),
            "update task",
        )
