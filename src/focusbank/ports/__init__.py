"""Ports - interfaces/protocols for external dependencies."""

from .task_repo import TaskRepository
from .goal_repo import GoalRepository
from .llm_service import LLMService

__all__ = [
    "TaskRepository",
    "GoalRepository",
    "LLMService",
]
