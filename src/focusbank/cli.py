"""Focusbank CLI - focus sessions and task backlog."""

import json
import logging
import sys

import click

from .config import load_config
from .core.quickstart import complete_directly, default_quick_minutes, quick_start
from .core.goals import Goal, GoalType
from .core.review import Resolution
from .core.session import (
    InvalidSessionState,
    Phase,
    Session,
    abandon,
    complete_item,
    pause,
    reallocate,
    resume,
    review,
    set_active_item,
    start_session,
    stop,
)
from .core.tasks import Category, Task, TaskStatus, filter_active, filter_backlog, format_clock
from .workflows import (
    create_goal,
    create_task,
    finish_session,
    get_llm,
    get_store,
    promote,
    run_session,
    summarize_progress,
)

CATEGORY_CHOICE = click.Choice([c.value for c in Category], case_sensitive=False)


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Focusbank - focus sessions for tasks and their work items."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


def _show_tasks(tasks: list[Task], as_json: bool, empty_msg: str) -> None:
    """Shared task display logic."""
    if as_json:
        click.echo(json.dumps([t.to_dict() for t in tasks], indent=2))
        return

    if not tasks:
        click.echo(empty_msg)
        return

    for task in tasks:
        mark = "x" if task.is_completed else ("~" if task.status == TaskStatus.IN_PROGRESS else " ")
        click.echo(
            f"[{mark}] {task.id}  {task.title}  ({task.category.value},"
            f" {task.actual_duration_minutes}/{task.planned_duration_minutes}m)"
        )
        for item in task.subtasks:
            done = "x" if item.is_completed else " "
            click.echo(
                f"      [{done}] {item.id}  {item.title}"
                f"  {item.actual_minutes}/{item.allocated_minutes}m"
            )


@main.command()
@click.argument("title")
@click.option("--minutes", "-m", default=0, type=click.IntRange(min=0), help="Planned minutes")
@click.option("--category", "-c", type=CATEGORY_CHOICE, default=None, help="Category (asks the model if omitted)")
@click.option("--backlog", is_flag=True, help="Put the task straight into the backlog")
@click.option("--item", "-i", "items", multiple=True, help="Work item as TITLE or TITLE:MINUTES")
@click.option("--goal", "-g", "goal_id", default=None, help="Goal to log session time against")
def add(
    title: str,
    minutes: int,
    category: str | None,
    backlog: bool,
    items: tuple[str, ...],
    goal_id: str | None,
):
    """Create a task."""
    config = load_config()
    store = get_store(config)

    parsed = []
    for raw in items:
        item_title, _, item_minutes = raw.rpartition(":")
        if not item_title or not item_minutes.strip().isdigit():
            item_title, item_minutes = raw, "0"
        parsed.append((item_title.strip(), int(item_minutes)))

    llm = None
    if category is None and config.auto_categorize:
        try:
            llm = get_llm(config)
        except RuntimeError as e:
            click.echo(f"Warning: {e}", err=True)

    try:
        task = create_task(
            store,
            title,
            minutes=minutes,
            category=Category.parse(category) if category else None,
            backlog=backlog,
            items=parsed,
            llm=llm,
            goal_id=goal_id,
            goals=store,
        )
    except KeyError as e:
        _fail(str(e))
    where = "backlog" if task.is_backlog else "active list"
    click.echo(f"Added {task.id} to the {where} ({task.category.value}, {task.planned_duration_minutes}m)")


@main.command()
@click.argument("task_id")
@click.argument("title")
@click.option("--minutes", "-m", default=0, type=click.IntRange(min=0), help="Allocated minutes")
@click.option("--category", "-c", type=CATEGORY_CHOICE, default=None, help="Defaults to the task's category")
def subtask(task_id: str, title: str, minutes: int, category: str | None):
    """Add a work item to a task."""
    store = get_store(load_config())
    try:
        task = store.get(task_id)
    except KeyError as e:
        _fail(str(e))

    item = task.add_item(title, minutes, Category.parse(category) if category else None)
    store.save(task)
    click.echo(f"Added item {item.id} to {task.title}")


@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--all", "show_all", is_flag=True, help="Include backlog tasks")
def list_tasks(as_json: bool, show_all: bool):
    """List active tasks."""
    tasks = get_store(load_config()).fetch_all()
    if not show_all:
        tasks = filter_active(tasks)
    _show_tasks(tasks, as_json, "No tasks.")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--category", "-c", type=CATEGORY_CHOICE, default=None, help="Only this category")
def backlog(as_json: bool, category: str | None):
    """List the backlog."""
    tasks = get_store(load_config()).fetch_all()
    selected = filter_backlog(tasks, Category.parse(category) if category else None)
    _show_tasks(selected, as_json, "Backlog is empty.")


@main.command("promote")
@click.argument("task_id")
@click.argument("backlog_id")
def promote_cmd(task_id: str, backlog_id: str):
    """Pull a backlog task into a task as a work item."""
    store = get_store(load_config())
    try:
        task = promote(store, task_id, backlog_id)
    except (KeyError, ValueError) as e:
        _fail(str(e))
    click.echo(f"{task.title} now has {len(task.subtasks)} item(s)")


@main.command()
@click.argument("task_id")
@click.argument("item_id", required=False)
def done(task_id: str, item_id: str | None):
    """Mark a task, or one of its items, complete."""
    store = get_store(load_config())
    try:
        task = store.get(task_id)
        if item_id:
            item = complete_directly(task, item_id)
            label = item.title
        else:
            task.status = TaskStatus.COMPLETED
            label = task.title
    except (KeyError, ValueError) as e:
        _fail(str(e))

    store.save(task)
    click.echo(f"✓ {label}")


def _goal_line(goal: Goal) -> str:
    deadline = f", due {goal.deadline}" if goal.deadline else ""
    return (
        f"{goal.id}  {goal.title}  {goal.logged_hours:g}/{goal.target_hours:g}h"
        f" ({goal.progress:.0%}, {goal.type.value.lower()}{deadline})"
    )


@main.command()
@click.argument("title")
@click.option(
    "--target", "-t", "target_hours", required=True,
    type=click.FloatRange(min=0, min_open=True), help="Target hours",
)
@click.option(
    "--type", "goal_type", default="MONTHLY",
    type=click.Choice([t.value for t in GoalType], case_sensitive=False),
)
@click.option("--deadline", "-d", default="", help="Deadline as YYYY-MM-DD")
def goal(title: str, target_hours: float, goal_type: str, deadline: str):
    """Create a goal that tasks can log time against."""
    store = get_store(load_config())
    created = create_goal(store, title, target_hours, GoalType(goal_type.upper()), deadline)
    click.echo(f"Added goal {_goal_line(created)}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def goals(as_json: bool):
    """List goals and their logged hours."""
    all_goals = get_store(load_config()).fetch_goals()
    if as_json:
        click.echo(json.dumps([g.to_dict() for g in all_goals], indent=2))
    elif not all_goals:
        click.echo("No goals.")
    else:
        for g in all_goals:
            click.echo(_goal_line(g))


# ============== Focus sessions ==============


def _render(session: Session) -> None:
    snap = session.snapshot()
    click.echo(f"\r  {format_clock(snap.remaining_seconds)}  {snap.active_title:40.40}", nl=False)


def _pick_item(session: Session, prompt: str) -> str | None:
    for n, item in enumerate(session.items, 1):
        done_mark = "x" if item.is_completed else " "
        active = "*" if item.id == session.active_item_id else " "
        click.echo(f"  {n}. [{done_mark}]{active} {item.title} ({item.allocated_minutes}m)")
    choice = click.prompt(prompt, default="", show_default=False).strip()
    if choice.isdigit() and 1 <= int(choice) <= len(session.items):
        return session.items[int(choice) - 1].id
    return choice or None


def _session_menu(session: Session) -> bool:
    """Paused-session menu. Returns False if the session was abandoned."""
    while session.phase == Phase.RUNNING:
        click.echo(f"\nPaused at {format_clock(session.total_remaining_seconds)}.")
        action = click.prompt(
            "[c]ontinue [s]top [e]xtend +5m [a]ctive [d]one item [q]uit",
            type=click.Choice(["c", "s", "e", "a", "d", "q"]),
            default="c",
        )
        match action:
            case "c":
                return True
            case "s":
                stop(session)
            case "e":
                try:
                    result = reallocate(session)
                except InvalidSessionState:
                    click.echo("Time is already up.")
                    continue
                if result.extended_clock:
                    click.echo("Added 5 minutes to the clock.")
                else:
                    click.echo(f"Moved {result.minutes_taken}m of budget to the current item.")
            case "a":
                item_id = _pick_item(session, "Record time against")
                if item_id and not set_active_item(session, item_id):
                    click.echo("That item can't be made active.")
            case "d":
                item_id = _pick_item(session, "Mark complete")
                if item_id and not complete_item(session, item_id):
                    click.echo("That item can't be completed.")
            case "q":
                if click.confirm("Discard this session without saving?"):
                    abandon(session)
                    return False
    return True


def _drive(session: Session) -> bool:
    """Run the session until review. Ctrl+C pauses and opens the menu."""
    click.echo("Ctrl+C for options.")
    while session.phase == Phase.RUNNING:
        try:
            run_session(session, on_tick=_render)
        except KeyboardInterrupt:
            pause(session)
            if not _session_menu(session):
                return False
            resume(session)
    click.echo()
    return True


def _review_and_resolve(session: Session) -> None:
    store = get_store(load_config())
    rows = review(session)

    click.echo(f"Session complete: {session.session_minutes}m recorded on {session.task.title}\n")
    for row in rows:
        done_mark = "x" if row.is_completed else " "
        flag = "  over budget" if row.over_budget else ""
        click.echo(
            f"  [{done_mark}] {row.title:30.30} {row.actual_minutes:>4}m / {row.allocated_minutes}m"
            f"  (+{row.minutes_this_session}m){flag}"
        )

    while click.confirm("\nMark an item complete?", default=False):
        item_id = _pick_item(session, "Item")
        if item_id:
            complete_item(session, item_id)

    unfinished = session.task.incomplete_items()
    choice = click.prompt(
        "[c]lose & save or [m]igrate remaining to backlog",
        type=click.Choice(["c", "m"]),
        default="m" if unfinished else "c",
    )
    if choice == "c":
        mark = click.confirm("Mark task complete?", default=not session.task.incomplete_items())
        task, new_backlog = finish_session(store, session, Resolution.CLOSE_AND_SAVE, mark, goals=store)
    else:
        task, new_backlog = finish_session(store, session, Resolution.MIGRATE_REMAINING, goals=store)

    click.echo(f"\n✓ {task.title}: {task.actual_duration_minutes}m total, {task.status.value}")
    for b in new_backlog:
        click.echo(f"  → backlog {b.id}  {b.title} ({b.planned_duration_minutes}m)")


@main.command()
@click.argument("task_id")
def focus(task_id: str):
    """Run a focus session for a task."""
    store = get_store(load_config())
    try:
        task = store.get(task_id)
    except KeyError as e:
        _fail(str(e))

    session = start_session(task)
    click.echo(f"Focusing on {task.title} for {format_clock(session.total_remaining_seconds)}")
    if _drive(session):
        _review_and_resolve(session)
    else:
        click.echo("Session discarded.")


@main.command()
@click.argument("task_id")
@click.argument("item_id")
@click.option("--minutes", "-m", type=click.IntRange(min=1), default=None, help="Session length")
@click.option("--complete", is_flag=True, help="Mark the item done without timing it")
def quick(task_id: str, item_id: str, minutes: int | None, complete: bool):
    """Time a single work item, or tick it off."""
    config = load_config()
    store = get_store(config)
    try:
        task = store.get(task_id)
        item = task.find_item(item_id)
        if item is None:
            raise ValueError(f"Task {task_id} has no item {item_id}")
        if complete:
            complete_directly(task, item_id)
            store.save(task)
            click.echo(f"✓ {item.title}")
            return
        if minutes is None:
            minutes = click.prompt(
                "Minutes",
                default=default_quick_minutes(item, config.default_quick_minutes),
                type=click.IntRange(min=1),
            )
        session = quick_start(task, item_id, minutes)
    except (KeyError, ValueError) as e:
        _fail(str(e))

    click.echo(f"Quick session: {item.title} for {minutes}m")
    if _drive(session):
        _review_and_resolve(session)
    else:
        click.echo("Session discarded.")


@main.command("review")
def review_cmd():
    """Summarize progress across tasks with the model."""
    config = load_config()
    tasks = get_store(config).fetch_all()
    if not tasks:
        click.echo("No tasks to review.")
        return
    try:
        llm = get_llm(config)
        if llm is None:
            _fail("No model configured (LLM_BACKEND=none)")
        click.echo(summarize_progress(tasks, llm))
    except RuntimeError as e:
        _fail(str(e))


if __name__ == "__main__":
    main()
