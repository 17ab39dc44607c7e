"""Shared workflow layer between the CLI and the functional core.

Each function here wires core logic to a store or a model service; nothing
in the session engine itself performs I/O.
"""

import logging
import signal
import threading
import time
from contextlib import contextmanager
from typing import Callable

from .adapters.cli_model import CLIModelService
from .adapters.gemini_api import GeminiModelService
from .adapters.json_store import JsonTaskStore
from .config import Config
from .core.goals import Goal, GoalType
from .core.review import Resolution
from .core.session import Phase, Session, resolve, tick
from .core.tasks import Category, Task, new_id, promote_backlog_task, sync_planned_duration
from .ports.goal_repo import GoalRepository
from .ports.llm_service import LLMService
from .ports.task_repo import TaskRepository

logger = logging.getLogger(__name__)


def get_store(config: Config) -> JsonTaskStore:
    """Resolve the task store from config."""
    return JsonTaskStore(config.tasks_path)


def get_llm(config: Config) -> LLMService | None:
    """Build the configured model service, or None when disabled."""
    match config.llm_backend:
        case "gemini":
            return GeminiModelService(config.gemini_api_key, model=config.gemini_model)
        case "cli":
            return CLIModelService(command=config.llm_command, timeout=config.llm_timeout)
        case _:
            return None


# ============== Collaborators ==============


def compile_categorize_prompt(title: str) -> str:
    """Prompt asking for exactly one category name."""
    names = ", ".join(c.value for c in Category)
    return (
        f'Pick the most appropriate category for a task titled "{title}".\n'
        f"Answer with exactly one word from: {names}."
    )


def categorize_title(title: str, llm: LLMService | None) -> Category:
    """
    Ask the model for a category. Falls back to OTHER on any failure.

    Only called when tasks are created outside a focus session.
    """
    if llm is None:
        return Category.OTHER
    try:
        answer = llm.generate(compile_categorize_prompt(title))
    except RuntimeError as e:
        logger.warning(f"Categorization failed for {title!r}: {e}")
        return Category.OTHER

    for word in answer.replace(",", " ").split():
        name = word.strip(".:*\"'`").upper()
        if name in Category.__members__:
            return Category[name]
    logger.warning(f"Unrecognized category answer for {title!r}: {answer!r}")
    return Category.OTHER


def compile_progress_prompt(tasks: list[Task]) -> str:
    """Context for the progress summary: completed log and the pending backlog."""
    completed = [t for t in tasks if t.is_completed]
    pending = [t for t in tasks if not t.is_completed]

    def completed_line(t: Task) -> str:
        items = "; ".join(
            f"{s.title}: {s.actual_minutes}m used / {s.allocated_minutes}m planned" for s in t.subtasks
        )
        return f"- {t.title} [{t.category.value}] {t.actual_duration_minutes}m total" + (
            f" ({items})" if items else ""
        )

    def pending_line(t: Task) -> str:
        items = "; ".join(
            f"{s.title}: {'Done' if s.is_completed else 'Pending'} ({s.actual_minutes}m spent)"
            for s in t.subtasks
        )
        where = "backlog" if t.is_backlog else "active"
        return (
            f"- {t.title} [{t.category.value}, {where}] planned {t.planned_duration_minutes}m,"
            f" spent so far {t.actual_duration_minutes}m" + (f" ({items})" if items else "")
        )

    completed_md = "\n".join(completed_line(t) for t in completed) or "None"
    pending_md = "\n".join(pending_line(t) for t in pending) or "None"

    return f"""Analyze this person's productivity progress.

## Completed Tasks
{completed_md}

## Pending Tasks (buildup)
{pending_md}

## Instructions
1. Many pending tasks with time already spent means work is piling up; say so.
2. Point out work items that took much longer than allocated.
3. Give one specific, actionable recommendation.
Keep it under 120 words.
"""


def summarize_progress(tasks: list[Task], llm: LLMService) -> str:
    """Compile the progress context and return the model's summary."""
    return llm.generate(compile_progress_prompt(tasks)).strip()


# ============== Task editing ==============


def create_task(
    store: TaskRepository,
    title: str,
    minutes: int = 0,
    category: Category | None = None,
    backlog: bool = False,
    items: list[tuple[str, int]] | None = None,
    llm: LLMService | None = None,
    goal_id: str | None = None,
    goals: GoalRepository | None = None,
) -> Task:
    """Create and store a task, asking the model for a category if none is given."""
    if minutes < 0:
        raise ValueError("Planned minutes must be non-negative")
    if goal_id and goals is not None:
        goals.get_goal(goal_id)
    if category is None:
        category = categorize_title(title, llm)

    task = Task(
        id=new_id(),
        title=title,
        category=category,
        planned_duration_minutes=minutes,
        is_backlog=backlog,
        linked_goal_id=goal_id,
    )
    for item_title, item_minutes in items or []:
        task.add_item(item_title, item_minutes)
    if items and not minutes:
        sync_planned_duration(task)

    store.save(task)
    logger.info(f"Created task {task.id} ({category.value})")
    return task


def create_goal(
    goals: GoalRepository,
    title: str,
    target_hours: float,
    goal_type: GoalType = GoalType.MONTHLY,
    deadline: str = "",
) -> Goal:
    if target_hours <= 0:
        raise ValueError("Target hours must be positive")
    goal = Goal(id=new_id(), title=title, target_hours=target_hours, type=goal_type, deadline=deadline)
    goals.save_goal(goal)
    logger.info(f"Created goal {goal.id} ({target_hours}h)")
    return goal


def promote(store: TaskRepository, task_id: str, backlog_id: str) -> Task:
    """Pull a backlog task into an active task as a new work item."""
    task = store.get(task_id)
    backlog_task = store.get(backlog_id)
    promote_backlog_task(task, backlog_task)
    store.save(task)
    store.delete(backlog_id)
    return task


# ============== Sessions ==============


@contextmanager
def _hold_interrupt():
    """Defer Ctrl+C until the block is done, then raise it."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    received = []
    previous = signal.signal(signal.SIGINT, lambda signum, frame: received.append(signum))
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)
    if received:
        raise KeyboardInterrupt


def run_session(
    session: Session,
    on_tick: Callable[[Session], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
    interval: float = 1.0,
) -> Session:
    """
    Drive a running session at a fixed cadence until it leaves RUNNING.

    Ctrl+C only interrupts the wait between ticks, so a tick is never cut
    off halfway through recording its seconds.
    """
    while session.phase == Phase.RUNNING:
        sleep(interval)
        with _hold_interrupt():
            tick(session)
            if on_tick:
                on_tick(session)
    return session


def finish_session(
    store: TaskRepository,
    session: Session,
    resolution: Resolution,
    mark_complete: bool = False,
    goals: GoalRepository | None = None,
) -> tuple[Task, list[Task]]:
    """
    Resolve a reviewed session and store the task and any new backlog tasks.

    The session's minutes are also logged against the task's linked goal.
    """
    task, backlog = resolve(session, resolution, mark_complete)
    store.save_many([task, *backlog])

    if goals is not None and task.linked_goal_id and session.session_minutes:
        try:
            goal = goals.get_goal(task.linked_goal_id)
        except KeyError:
            logger.warning(f"Task {task.id} links to missing goal {task.linked_goal_id}")
        else:
            goal.log_minutes(session.session_minutes)
            goals.save_goal(goal)
    return task, backlog
