"""Session review breakdown and the two terminal resolutions - pure functions."""

import logging
from dataclasses import dataclass
from enum import Enum

from .tasks import Task, TaskStatus, WorkItem, make_backlog_tasks

logger = logging.getLogger(__name__)


class Resolution(Enum):
    """How a reviewed session ends."""

    CLOSE_AND_SAVE = "close"
    MIGRATE_REMAINING = "migrate"


@dataclass
class ItemReview:
    """One row of the end-of-session breakdown."""

    item_id: str
    title: str
    allocated_minutes: int
    actual_minutes: int
    minutes_this_session: int
    is_completed: bool

    @property
    def over_budget(self) -> bool:
        return self.actual_minutes > self.allocated_minutes

    @property
    def variance_minutes(self) -> int:
        """Actual minus allocated; positive means over budget."""
        return self.actual_minutes - self.allocated_minutes


def breakdown(items: list[WorkItem], minutes_added: dict[str | None, int]) -> list[ItemReview]:
    """Per-item actual vs allocated, in list order."""
    return [
        ItemReview(
            item_id=item.id,
            title=item.title,
            allocated_minutes=item.allocated_minutes,
            actual_minutes=item.actual_minutes,
            minutes_this_session=minutes_added.get(item.id, 0),
            is_completed=item.is_completed,
        )
        for item in items
    ]


def close_and_save(task: Task, session_minutes: int, mark_complete: bool = False) -> Task:
    """
    Keep every item, add the session's minutes to the task total.

    The task only becomes COMPLETED when asked to; otherwise a task that was
    still TODO moves to IN_PROGRESS.
    """
    task.actual_duration_minutes += session_minutes
    if mark_complete:
        task.status = TaskStatus.COMPLETED
    elif task.status == TaskStatus.TODO:
        task.status = TaskStatus.IN_PROGRESS
    logger.info(f"Closed task {task.id}: +{session_minutes}m, status {task.status.value}")
    return task


def migrate_remaining(task: Task, session_minutes: int) -> tuple[Task, list[Task]]:
    """
    Move the task's unfinished items out of it and into the backlog.

    Every incomplete subtask becomes a standalone backlog task linked to the
    same goal, and is removed from the parent. Recorded minutes count toward
    the parent whether the item finished or not. The parent is COMPLETED
    when no incomplete subtasks are left, otherwise its status is unchanged.

    Returns: (task, new_backlog_tasks)
    """
    unfinished = task.incomplete_items()
    unfinished_ids = {item.id for item in unfinished}

    backlog = make_backlog_tasks(unfinished, goal_id=task.linked_goal_id)
    task.subtasks = [s for s in task.subtasks if s.id not in unfinished_ids]
    task.actual_duration_minutes += session_minutes

    if not task.incomplete_items():
        task.status = TaskStatus.COMPLETED

    logger.info(
        f"Migrated {len(backlog)} item(s) from task {task.id} to backlog: +{session_minutes}m"
    )
    return task, backlog
