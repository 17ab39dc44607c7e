"""Functional core - pure business logic with no I/O."""

from .tasks import (
    Category,
    Task,
    TaskStatus,
    WorkItem,
    filter_backlog,
    make_backlog_tasks,
    promote_backlog_task,
)
from .goals import Goal, GoalType
from .clock import SessionClock
from .ledger import Ledger
from .reallocation import ReallocationResult
from .review import ItemReview, Resolution
from .session import (
    InvalidSessionState,
    Phase,
    Session,
    SessionSnapshot,
    abandon,
    complete_item,
    reallocate,
    resolve,
    set_active_item,
    start_session,
    stop,
    tick,
)
from .quickstart import complete_directly, quick_start

__all__ = [
    # Tasks
    "Category",
    "Task",
    "TaskStatus",
    "WorkItem",
    "filter_backlog",
    "make_backlog_tasks",
    "promote_backlog_task",
    # Goals
    "Goal",
    "GoalType",
    # Session engine
    "SessionClock",
    "Ledger",
    "ReallocationResult",
    "ItemReview",
    "Resolution",
    "InvalidSessionState",
    "Phase",
    "Session",
    "SessionSnapshot",
    "abandon",
    "complete_item",
    "reallocate",
    "resolve",
    "set_active_item",
    "start_session",
    "stop",
    "tick",
    # Quick start
    "complete_directly",
    "quick_start",
]
