"""Adapters - I/O implementations of ports."""

from .json_store import GoalNotFoundError, JsonTaskStore, TaskNotFoundError
from .cli_model import CLIModelService
from .gemini_api import GeminiModelService

__all__ = [
    "JsonTaskStore",
    "TaskNotFoundError",
    "GoalNotFoundError",
    "CLIModelService",
    "GeminiModelService",
]
