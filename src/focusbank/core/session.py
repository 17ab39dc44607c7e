"""
Focus session engine.

A Session is one timed focus invocation against a Task. It owns a working
copy of the task, a countdown clock and a transient ledger, and moves through
EDITING -> RUNNING -> REVIEWING -> CLOSED. All mutation happens through the
functions below, called from a single tick source or from user actions.
"""

import copy
import logging
import time
from dataclasses import dataclass, field
from enum import Enum

from .clock import SessionClock, TimeSource
from .ledger import TASK_LEVEL, Ledger
from .reallocation import ReallocationResult, plan_extension
from .review import ItemReview, Resolution, breakdown, close_and_save, migrate_remaining
from .selector import can_activate, default_active_id
from .tasks import Category, Task, TaskStatus, WorkItem, implicit_item

logger = logging.getLogger(__name__)


class Phase(Enum):
    EDITING = "editing"
    RUNNING = "running"
    REVIEWING = "reviewing"
    CLOSED = "closed"


class InvalidSessionState(RuntimeError):
    """Raised when an operation is called in a phase that does not allow it."""

    def __init__(self, operation: str, phase: Phase):
        super().__init__(f"Cannot {operation} a session that is {phase.value}")
        self.operation = operation
        self.phase = phase


@dataclass
class ItemSnapshot:
    id: str
    title: str
    category: Category
    allocated_minutes: int
    actual_minutes: int
    is_completed: bool
    pending_seconds: int
    is_active: bool


@dataclass
class SessionSnapshot:
    """Plain data view of a session for rendering."""

    task_id: str
    task_title: str
    phase: Phase
    total_seconds: int
    remaining_seconds: int
    is_paused: bool
    is_pinned: bool
    active_item_id: str | None
    active_title: str
    task_pending_seconds: int
    items: list[ItemSnapshot]


@dataclass
class Session:
    """Ephemeral state of one focus invocation. Never persisted."""

    task: Task
    items: list[WorkItem]
    clock: SessionClock
    ledger: Ledger = field(default_factory=Ledger)
    phase: Phase = Phase.EDITING
    active_item_id: str | None = None
    is_pinned: bool = False
    is_implicit: bool = False
    minutes_added: dict[str | None, int] = field(default_factory=dict)

    @property
    def total_remaining_seconds(self) -> int:
        return self.clock.remaining_seconds

    @property
    def elapsed_by_item(self) -> dict[str | None, int]:
        return self.ledger.elapsed_by_item

    @property
    def session_minutes(self) -> int:
        """Minutes flushed so far in this session, across all items and the task itself."""
        return sum(self.minutes_added.values())

    def find_item(self, item_id: str | None) -> WorkItem | None:
        return next((i for i in self.items if i.id == item_id), None)

    @property
    def active_item(self) -> WorkItem | None:
        return self.find_item(self.active_item_id)

    def snapshot(self) -> SessionSnapshot:
        active = self.active_item
        return SessionSnapshot(
            task_id=self.task.id,
            task_title=self.task.title,
            phase=self.phase,
            total_seconds=self.clock.total_seconds,
            remaining_seconds=self.clock.remaining_seconds,
            is_paused=self.clock.is_paused,
            is_pinned=self.is_pinned,
            active_item_id=self.active_item_id,
            active_title=active.title if active else self.task.title,
            task_pending_seconds=self.ledger.pending_seconds(TASK_LEVEL),
            items=[
                ItemSnapshot(
                    id=i.id,
                    title=i.title,
                    category=i.category,
                    allocated_minutes=i.allocated_minutes,
                    actual_minutes=i.actual_minutes,
                    is_completed=i.is_completed,
                    pending_seconds=self.ledger.pending_seconds(i.id),
                    is_active=i.id == self.active_item_id,
                )
                for i in self.items
            ],
        )


def open_session(
    task: Task,
    only_item_id: str | None = None,
    now: TimeSource = time.monotonic,
) -> Session:
    """
    Create an EDITING session over a copy of `task`.

    With only_item_id the session tracks that single item and pins it as
    the active one. A task without subtasks is tracked as one synthetic item.
    """
    working = copy.deepcopy(task)

    if only_item_id is not None:
        item = working.find_item(only_item_id)
        if item is None:
            raise ValueError(f"Task {task.id} has no item {only_item_id}")
        return Session(
            task=working,
            items=[item],
            clock=SessionClock(now),
            active_item_id=item.id if not item.is_completed else None,
            is_pinned=True,
        )

    if working.subtasks:
        return Session(task=working, items=working.subtasks, clock=SessionClock(now))

    return Session(
        task=working,
        items=[implicit_item(working)],
        clock=SessionClock(now),
        is_implicit=True,
    )


def begin(session: Session, total_seconds: int) -> Session:
    """
    Start the countdown. A non-positive duration goes straight to review
    with nothing recorded.
    """
    if session.phase != Phase.EDITING:
        raise InvalidSessionState("start", session.phase)

    if not session.clock.start(total_seconds):
        logger.info(f"Session for task {session.task.id} has no duration; reviewing immediately")
        _enter_review(session)
        return session

    session.phase = Phase.RUNNING
    if session.active_item_id is None and not session.is_pinned:
        session.active_item_id = default_active_id(session.items)
    logger.info(
        f"Started {total_seconds}s session for task {session.task.id}"
        f" (active: {session.active_item_id or 'task'})"
    )
    return session


def start_session(task: Task, now: TimeSource = time.monotonic) -> Session:
    """Open a session for `task` and run it for its planned duration."""
    if task.planned_duration_minutes < 0:
        raise ValueError("planned_duration_minutes must be non-negative")
    session = open_session(task, now=now)
    return begin(session, task.planned_duration_minutes * 60)


def _enter_review(session: Session) -> None:
    session.phase = Phase.REVIEWING
    flush(session)


def flush(session: Session) -> dict[str | None, int]:
    """Move pending seconds into the items' actual minutes. Safe to repeat."""
    added = session.ledger.flush(session.items)
    for key, minutes in added.items():
        session.minutes_added[key] = session.minutes_added.get(key, 0) + minutes
    if added:
        logger.debug(f"Flushed {added} for task {session.task.id}")
    return added


def tick(session: Session) -> int:
    """
    Advance the session by the whole seconds that passed since the last tick.

    Each second is recorded against the active item (or the task itself when
    nothing is active). Reaching zero moves the session to REVIEWING.
    Returns the seconds recorded.
    """
    if session.phase != Phase.RUNNING:
        return 0

    due = session.clock.tick()
    for _ in range(due):
        session.ledger.record_second(session.active_item_id)

    if not session.clock.is_running:
        logger.info(f"Session for task {session.task.id} ran out of time")
        _enter_review(session)
    return due


def stop(session: Session) -> None:
    """Finish early: record what is pending, flush and move to review."""
    if session.phase != Phase.RUNNING:
        raise InvalidSessionState("stop", session.phase)
    due = session.clock.stop()
    for _ in range(due):
        session.ledger.record_second(session.active_item_id)
    logger.info(
        f"Session for task {session.task.id} stopped with"
        f" {session.clock.remaining_seconds}s remaining"
    )
    _enter_review(session)


def pause(session: Session) -> None:
    if session.phase == Phase.RUNNING:
        session.clock.pause()


def resume(session: Session) -> None:
    if session.phase == Phase.RUNNING:
        session.clock.resume()


def set_active_item(session: Session, item_id: str) -> bool:
    """
    Record future seconds against another item.

    Silently rejected (returns False) outside RUNNING, for pinned sessions,
    and for unknown or completed items. Time already recorded stays put.
    """
    if session.phase != Phase.RUNNING or session.is_pinned:
        return False
    if not can_activate(session.items, item_id):
        logger.debug(f"Rejected switch to {item_id!r} in task {session.task.id}")
        return False
    session.active_item_id = item_id
    return True


def complete_item(session: Session, item_id: str) -> bool:
    """
    Tick an item off during the session or at review.

    No time is accounted. If the item was active, the first-incomplete rule
    picks the next one (pinned sessions fall back to task-level time).
    """
    if session.phase not in (Phase.RUNNING, Phase.REVIEWING):
        return False
    item = session.find_item(item_id)
    if item is None or item.is_completed:
        return False

    item.is_completed = True
    if session.phase == Phase.RUNNING and session.active_item_id == item_id:
        session.active_item_id = None if session.is_pinned else default_active_id(session.items)
    return True


def _expire(session: Session) -> None:
    due = session.clock.stop()
    for _ in range(due):
        session.ledger.record_second(session.active_item_id)
    logger.info(f"Session for task {session.task.id} ran out of time")
    _enter_review(session)


def reallocate(session: Session) -> ReallocationResult:
    """
    Extend +5m: move budget to the current item, or add five minutes to the clock.

    A session whose time ran out before the last tick is closed out into
    REVIEWING instead, and the call raises.
    """
    if session.phase == Phase.RUNNING and session.clock.is_expired:
        _expire(session)
    if session.phase != Phase.RUNNING:
        raise InvalidSessionState("reallocate", session.phase)

    result = plan_extension(session.items)
    if result.extended_clock:
        session.clock.extend(result.clock_extension_seconds)
        logger.info(f"Extended clock by {result.clock_extension_seconds}s for task {session.task.id}")
    else:
        logger.info(
            f"Moved {result.minutes_taken}m from {result.reduced_item_id}"
            f" to {result.extended_item_id} in task {session.task.id}"
        )
    return result


def review(session: Session) -> list[ItemReview]:
    """Per-item breakdown for the review screen."""
    if session.phase != Phase.REVIEWING:
        raise InvalidSessionState("review", session.phase)
    return breakdown(session.items, session.minutes_added)


def resolve(
    session: Session,
    resolution: Resolution,
    mark_complete: bool = False,
) -> tuple[Task, list[Task]]:
    """
    End a reviewed session.

    Returns the updated task and any new backlog tasks. The session is
    CLOSED afterwards; start a new one to continue working.
    """
    if session.phase != Phase.REVIEWING:
        raise InvalidSessionState("resolve", session.phase)

    task = session.task
    minutes = session.session_minutes
    new_backlog: list[Task] = []

    if session.is_implicit:
        implicit_done = session.items[0].is_completed
        if resolution == Resolution.CLOSE_AND_SAVE:
            close_and_save(task, minutes, mark_complete or implicit_done)
        else:
            # Nothing to migrate; the task is its own single item.
            task.actual_duration_minutes += minutes
            if implicit_done:
                task.status = TaskStatus.COMPLETED
    elif resolution == Resolution.CLOSE_AND_SAVE:
        close_and_save(task, minutes, mark_complete)
    else:
        task, new_backlog = migrate_remaining(task, minutes)

    session.phase = Phase.CLOSED
    return task, new_backlog


def abandon(session: Session) -> None:
    """Drop the session without touching the caller's task."""
    if session.phase == Phase.CLOSED:
        return
    logger.info(f"Abandoned session for task {session.task.id} in phase {session.phase.value}")
    session.clock.stop()
    session.phase = Phase.CLOSED
