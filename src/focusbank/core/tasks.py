"""Pure task domain logic - no I/O dependencies."""

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum


class Category(Enum):
    """Closed set of task categories."""

    RESEARCH = "RESEARCH"
    CREATION = "CREATION"
    LEARNING = "LEARNING"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: str | None) -> "Category":
        """Parse a category name, falling back to OTHER."""
        if not value:
            return cls.OTHER
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.OTHER


class TaskStatus(Enum):
    """Task lifecycle status."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


def new_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class WorkItem:
    """An ordered, individually time-tracked subtask of a Task."""

    id: str
    title: str
    category: Category = Category.OTHER
    allocated_minutes: int = 0
    actual_minutes: int = 0
    is_completed: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category.value,
            "allocatedMinutes": self.allocated_minutes,
            "actualMinutes": self.actual_minutes,
            "isCompleted": self.is_completed,
        }

    @classmethod
    def from_dict(cls, data: dict, default_category: Category = Category.OTHER) -> "WorkItem":
        category = Category.parse(data["category"]) if data.get("category") else default_category
        return cls(
            id=data["id"],
            title=data["title"],
            category=category,
            allocated_minutes=max(0, int(data.get("allocatedMinutes") or 0)),
            actual_minutes=max(0, int(data.get("actualMinutes") or 0)),
            is_completed=bool(data.get("isCompleted", False)),
        )


@dataclass
class Task:
    """A task, optionally split into ordered work items."""

    id: str
    title: str
    category: Category = Category.OTHER
    planned_duration_minutes: int = 0
    actual_duration_minutes: int = 0
    status: TaskStatus = TaskStatus.TODO
    subtasks: list[WorkItem] = field(default_factory=list)
    is_backlog: bool = False
    description: str = ""
    linked_goal_id: str | None = None
    created_at: int = field(default_factory=lambda: int(time.time()))

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    def incomplete_items(self) -> list[WorkItem]:
        return [s for s in self.subtasks if not s.is_completed]

    def completed_items(self) -> list[WorkItem]:
        return [s for s in self.subtasks if s.is_completed]

    def find_item(self, item_id: str) -> WorkItem | None:
        return next((s for s in self.subtasks if s.id == item_id), None)

    def allocated_total(self) -> int:
        """Sum of the work items' allocations."""
        return sum(s.allocated_minutes for s in self.subtasks)

    def add_item(
        self,
        title: str,
        allocated_minutes: int = 0,
        category: Category | None = None,
    ) -> WorkItem:
        """Append a new work item, inheriting the task's category by default."""
        if allocated_minutes < 0:
            raise ValueError("allocated_minutes must be non-negative")
        item = WorkItem(
            id=new_id(),
            title=title,
            category=category or self.category,
            allocated_minutes=allocated_minutes,
        )
        self.subtasks.append(item)
        return item

    def remove_item(self, item_id: str) -> WorkItem | None:
        item = self.find_item(item_id)
        if item:
            self.subtasks.remove(item)
        return item

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "plannedDurationMinutes": self.planned_duration_minutes,
            "actualDurationMinutes": self.actual_duration_minutes,
            "status": self.status.value,
            "subtasks": [s.to_dict() for s in self.subtasks],
            "isBacklog": self.is_backlog,
            "linkedGoalId": self.linked_goal_id,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from its stored JSON shape."""
        category = Category.parse(data.get("category"))
        try:
            status = TaskStatus(data.get("status", "TODO"))
        except ValueError:
            status = TaskStatus.TODO
        return cls(
            id=data["id"],
            title=data["title"],
            category=category,
            planned_duration_minutes=max(0, int(data.get("plannedDurationMinutes") or 0)),
            actual_duration_minutes=max(0, int(data.get("actualDurationMinutes") or 0)),
            status=status,
            subtasks=[WorkItem.from_dict(s, category) for s in data.get("subtasks", [])],
            is_backlog=bool(data.get("isBacklog", False)),
            description=data.get("description", "") or "",
            linked_goal_id=data.get("linkedGoalId") or None,
            created_at=int(data.get("createdAt") or time.time()),
        )


def implicit_item(task: Task) -> WorkItem:
    """
    Synthetic work item standing in for a task with no subtasks.

    Shares the task's id and title; its allocation is the planned duration.
    """
    return WorkItem(
        id=task.id,
        title=task.title,
        category=task.category,
        allocated_minutes=task.planned_duration_minutes,
        actual_minutes=0,
        is_completed=task.is_completed,
    )


def sync_planned_duration(task: Task) -> int:
    """Set the planned duration to the sum of item allocations, if any items exist."""
    if task.subtasks:
        task.planned_duration_minutes = task.allocated_total()
    return task.planned_duration_minutes


def make_backlog_tasks(items: list[WorkItem], goal_id: str | None = None) -> list[Task]:
    """
    Turn work items into standalone backlog tasks.

    Title and category are copied, the allocation becomes the planned
    duration, and recorded time starts over at zero. The new tasks keep the
    parent's goal link.
    """
    return [
        Task(
            id=new_id(),
            title=item.title,
            category=item.category,
            planned_duration_minutes=item.allocated_minutes,
            actual_duration_minutes=0,
            status=TaskStatus.TODO,
            is_backlog=True,
            linked_goal_id=goal_id,
        )
        for item in items
    ]


def promote_backlog_task(task: Task, backlog_task: Task) -> WorkItem:
    """
    Consume a backlog task into a work item of an active task.

    The caller is responsible for deleting the backlog task from storage.
    """
    if not backlog_task.is_backlog:
        raise ValueError(f"Task {backlog_task.id} is not in the backlog")
    item = WorkItem(
        id=backlog_task.id,
        title=backlog_task.title,
        category=backlog_task.category,
        allocated_minutes=backlog_task.planned_duration_minutes,
        actual_minutes=backlog_task.actual_duration_minutes,
        is_completed=False,
    )
    task.subtasks.append(item)
    return item


def toggle_backlog(task: Task) -> bool:
    """Flip backlog membership. Returns the new value."""
    task.is_backlog = not task.is_backlog
    return task.is_backlog


def filter_backlog(tasks: list[Task], category: Category | None = None) -> list[Task]:
    """Backlog tasks that are not completed, optionally limited to one category."""
    return [
        t
        for t in tasks
        if t.is_backlog
        and not t.is_completed
        and (category is None or t.category == category)
    ]


def filter_active(tasks: list[Task]) -> list[Task]:
    """Tasks on the active list (not in the backlog)."""
    return [t for t in tasks if not t.is_backlog]


def format_clock(total_seconds: int) -> str:
    """Format seconds as MM:SS, or H:MM:SS from one hour up."""
    total_seconds = max(0, int(total_seconds))
    h, rest = divmod(total_seconds, 3600)
    m, s = divmod(rest, 60)
    if h > 0:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m:02d}:{s:02d}"
