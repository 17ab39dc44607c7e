"""Active item selection rules - pure functions over ordered work items."""

from .tasks import WorkItem


def first_incomplete(items: list[WorkItem]) -> WorkItem | None:
    """First incomplete item in list order."""
    return next((item for item in items if not item.is_completed), None)


def next_incomplete_after(items: list[WorkItem], current: WorkItem) -> WorkItem | None:
    """First incomplete item strictly after `current` in list order."""
    try:
        position = next(i for i, item in enumerate(items) if item is current)
    except StopIteration:
        return None
    return first_incomplete(items[position + 1 :])


def default_active_id(items: list[WorkItem]) -> str | None:
    """Id to record against when nothing is selected yet, or None for task-level time."""
    item = first_incomplete(items)
    return item.id if item else None


def can_activate(items: list[WorkItem], item_id: str | None) -> bool:
    """True if item_id names an incomplete item in `items`."""
    if item_id is None:
        return False
    item = next((i for i in items if i.id == item_id), None)
    return item is not None and not item.is_completed
