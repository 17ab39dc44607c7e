"""Transient per-item elapsed-time ledger for one focus session."""

import math
from dataclasses import dataclass, field

from .tasks import WorkItem

# Key under which time not attributed to any item is kept.
TASK_LEVEL = None


def seconds_to_minutes(seconds: int) -> int:
    """Whole minutes for a span of seconds, rounded up."""
    if seconds <= 0:
        return 0
    return math.ceil(seconds / 60)


@dataclass
class Ledger:
    """
    Seconds recorded against work items but not yet flushed to actual_minutes.

    Lives on a Session; one ledger per focus invocation.
    """

    elapsed_by_item: dict[str | None, int] = field(default_factory=dict)

    def record_second(self, item_id: str | None) -> None:
        """Attribute one second to an item, or to the task itself when item_id is None."""
        self.elapsed_by_item[item_id] = self.elapsed_by_item.get(item_id, 0) + 1

    def pending_seconds(self, item_id: str | None = TASK_LEVEL) -> int:
        return self.elapsed_by_item.get(item_id, 0)

    def total_pending(self) -> int:
        return sum(self.elapsed_by_item.values())

    def flush(self, items: list[WorkItem]) -> dict[str | None, int]:
        """
        Convert pending seconds into minutes on each item.

        Every key with pending seconds is rounded up to whole minutes, added
        to the matching item's actual_minutes and reset to zero. Task-level
        minutes have no item to land on and are only reported under None.
        Keys with nothing pending are skipped, so a second flush is a no-op.

        Returns: minutes added per key.
        """
        by_id = {item.id: item for item in items}
        added: dict[str | None, int] = {}

        for key, seconds in self.elapsed_by_item.items():
            if seconds <= 0:
                continue
            minutes = seconds_to_minutes(seconds)
            if key is not TASK_LEVEL:
                by_id[key].actual_minutes += minutes
            added[key] = minutes
            self.elapsed_by_item[key] = 0

        return added
