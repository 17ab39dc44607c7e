"""Quick-start: time a single item, or tick it off without a session."""

import time

from .clock import TimeSource
from .session import Session, begin, open_session
from .tasks import Task, WorkItem

DEFAULT_QUICK_MINUTES = 25
MIN_QUICK_MINUTES = 1


def _incomplete_item(task: Task, item_id: str) -> WorkItem:
    item = task.find_item(item_id)
    if item is None:
        raise ValueError(f"Task {task.id} has no item {item_id}")
    if item.is_completed:
        raise ValueError(f"Item {item_id} is already completed")
    return item


def default_quick_minutes(item: WorkItem, fallback: int = DEFAULT_QUICK_MINUTES) -> int:
    """The item's own allocation, or the fallback when it has none."""
    return item.allocated_minutes or fallback


def quick_start(
    task: Task,
    item_id: str,
    minutes: int | None = None,
    now: TimeSource = time.monotonic,
    fallback_minutes: int = DEFAULT_QUICK_MINUTES,
) -> Session:
    """
    Start a single-item session with the item pinned as active.

    The chosen duration becomes the item's allocation on `task` before the
    clock starts.
    """
    item = _incomplete_item(task, item_id)
    if minutes is None:
        minutes = default_quick_minutes(item, fallback_minutes)
    if minutes < MIN_QUICK_MINUTES:
        raise ValueError(f"Quick start needs at least {MIN_QUICK_MINUTES} minute")

    item.allocated_minutes = minutes
    session = open_session(task, only_item_id=item_id, now=now)
    return begin(session, minutes * 60)


def complete_directly(task: Task, item_id: str) -> WorkItem:
    """Mark an item done without timing it."""
    item = _incomplete_item(task, item_id)
    item.is_completed = True
    return item
