"""JSON file task store adapter."""

import json
import logging
from pathlib import Path

from focusbank.core.goals import Goal
from focusbank.core.tasks import Task

logger = logging.getLogger(__name__)


class TaskNotFoundError(KeyError):
    """Raised when a task id is not in the store."""

    def __str__(self) -> str:
        return f"No task with id {self.args[0]}"


class GoalNotFoundError(KeyError):
    def __str__(self) -> str:
        return f"No goal with id {self.args[0]}"


class JsonTaskStore:
    """
    Single-file JSON task store.

    Implements the TaskRepository and GoalRepository protocols. Tasks and
    goals share one file, which is rewritten on every save; it is small and
    only one process writes it.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise RuntimeError(f"Task file {self.path} is not valid JSON: {e}")

    def _dump(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, indent=2))
        tmp.replace(self.path)

    def _read(self) -> list[Task]:
        return [Task.from_dict(item) for item in self._load().get("tasks", [])]

    def _write(self, tasks: list[Task]) -> None:
        data = self._load()
        data["tasks"] = [t.to_dict() for t in tasks]
        self._dump(data)

    def fetch_all(self) -> list[Task]:
        """Fetch all tasks, active and backlog."""
        return self._read()

    def fetch_backlog(self) -> list[Task]:
        """Fetch backlog tasks only."""
        return [t for t in self._read() if t.is_backlog]

    def get(self, task_id: str) -> Task:
        """Fetch one task by id."""
        for task in self._read():
            if task.id == task_id:
                return task
        raise TaskNotFoundError(task_id)

    def save(self, task: Task) -> None:
        """Insert or replace a task."""
        self.save_many([task])

    def save_many(self, tasks: list[Task]) -> None:
        """Insert or replace several tasks, keeping existing order."""
        existing = self._read()
        incoming = {t.id: t for t in tasks}
        merged = [incoming.pop(t.id, t) for t in existing]
        merged.extend(incoming.values())
        self._write(merged)
        logger.debug(f"Saved {len(tasks)} task(s) to {self.path}")

    def delete(self, task_id: str) -> None:
        """Remove a task by id."""
        existing = self._read()
        remaining = [t for t in existing if t.id != task_id]
        if len(remaining) == len(existing):
            raise TaskNotFoundError(task_id)
        self._write(remaining)

    # ============== Goals ==============

    def fetch_goals(self) -> list[Goal]:
        return [Goal.from_dict(item) for item in self._load().get("goals", [])]

    def get_goal(self, goal_id: str) -> Goal:
        for goal in self.fetch_goals():
            if goal.id == goal_id:
                return goal
        raise GoalNotFoundError(goal_id)

    def save_goal(self, goal: Goal) -> None:
        """Insert or replace a goal."""
        data = self._load()
        goals = [Goal.from_dict(item) for item in data.get("goals", [])]
        replaced = [goal if g.id == goal.id else g for g in goals]
        if not any(g.id == goal.id for g in goals):
            replaced.append(goal)
        data["goals"] = [g.to_dict() for g in replaced]
        self._dump(data)
