"""The "Extend +5m" reallocation policy."""

from dataclasses import dataclass

from .selector import first_incomplete, next_incomplete_after
from .tasks import WorkItem

EXTEND_MINUTES = 5
EXTEND_SECONDS = EXTEND_MINUTES * 60


@dataclass
class ReallocationResult:
    """What a reallocation did: moved budget between items, or extended the clock."""

    extended_item_id: str | None = None
    reduced_item_id: str | None = None
    minutes_taken: int = 0
    clock_extension_seconds: int = 0

    @property
    def extended_clock(self) -> bool:
        return self.clock_extension_seconds > 0


def plan_extension(items: list[WorkItem]) -> ReallocationResult:
    """
    Apply the extend policy to the item allocations.

    The first incomplete item gains EXTEND_MINUTES. The next incomplete item
    after it gives up to EXTEND_MINUTES, floored at zero; any shortfall is
    not recovered from elsewhere. With fewer than two incomplete items the
    allocations are left alone and the result asks for a clock extension
    instead.
    """
    current = first_incomplete(items)
    following = next_incomplete_after(items, current) if current else None

    if current is None or following is None:
        return ReallocationResult(clock_extension_seconds=EXTEND_SECONDS)

    taken = min(EXTEND_MINUTES, following.allocated_minutes)
    current.allocated_minutes += EXTEND_MINUTES
    following.allocated_minutes = max(0, following.allocated_minutes - EXTEND_MINUTES)

    return ReallocationResult(
        extended_item_id=current.id,
        reduced_item_id=following.id,
        minutes_taken=taken,
    )
