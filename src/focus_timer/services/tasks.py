"""Task collaborator interface."""

from typing import Protocol
from uuid import UUID


class TaskRepository(Protocol):
    """Persistence interface for the external task entity."""

    def increment_completed_intervals(self, task_id: UUID) -> None:
        """Increment the completed focus interval counter of a task."""
