"""Goal repository interface."""

from typing import Protocol

from focusbank.core.goals import Goal


class GoalRepository(Protocol):
    """Interface for loading and saving goals."""

    def fetch_goals(self) -> list[Goal]:
        ...

    def get_goal(self, goal_id: str) -> Goal:
        """Fetch one goal. Raises KeyError if unknown."""
        ...

    def save_goal(self, goal: Goal) -> None:
        """Insert or replace a goal."""
        ...
