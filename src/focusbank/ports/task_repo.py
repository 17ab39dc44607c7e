"""Task repository interface."""

from typing import Protocol

from focusbank.core.tasks import Task


class TaskRepository(Protocol):
    """Interface for loading and saving tasks in any backend."""

    def fetch_all(self) -> list[Task]:
        """Fetch all tasks, active and backlog."""
        ...

    def fetch_backlog(self) -> list[Task]:
        """Fetch backlog tasks only."""
        ...

    def get(self, task_id: str) -> Task:
        """Fetch one task. Raises KeyError if unknown."""
        ...

    def save(self, task: Task) -> None:
        """Insert or replace a task."""
        ...

    def save_many(self, tasks: list[Task]) -> None:
        """Insert or replace several tasks in one write."""
        ...

    def delete(self, task_id: str) -> None:
        """Remove a task. Raises KeyError if unknown."""
        ...
