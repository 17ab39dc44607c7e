"""Tests for quick-start sub-sessions."""

import pytest

from conftest import run_for
from focusbank.core.quickstart import complete_directly, default_quick_minutes, quick_start
from focusbank.core.review import Resolution
from focusbank.core.session import (
    Phase,
    complete_item,
    reallocate,
    resolve,
    set_active_item,
    stop,
)
from focusbank.core.tasks import Task, TaskStatus, WorkItem


@pytest.fixture
def task():
    return Task(
        id="t",
        title="Exam prep",
        planned_duration_minutes=40,
        subtasks=[
            WorkItem(id="a", title="Algebra", allocated_minutes=20),
            WorkItem(id="b", title="Fractions", allocated_minutes=0),
            WorkItem(id="c", title="Geometry", allocated_minutes=20, is_completed=True),
        ],
    )


class TestDefaults:
    def test_uses_item_allocation(self, task):
        assert default_quick_minutes(task.subtasks[0]) == 20

    def test_falls_back_to_25(self, task):
        assert default_quick_minutes(task.subtasks[1]) == 25
        assert default_quick_minutes(task.subtasks[1], fallback=15) == 15


class TestQuickStart:
    def test_pins_item_and_sets_allocation(self, task, clock):
        session = quick_start(task, "b", minutes=10, now=clock)

        assert session.phase == Phase.RUNNING
        assert session.is_pinned
        assert session.active_item_id == "b"
        assert session.total_remaining_seconds == 600
        assert task.subtasks[1].allocated_minutes == 10
        assert [i.id for i in session.items] == ["b"]

    def test_default_duration(self, task, clock):
        session = quick_start(task, "b", now=clock)
        assert session.total_remaining_seconds == 25 * 60
        assert task.subtasks[1].allocated_minutes == 25

    def test_active_item_cannot_switch(self, task, clock):
        session = quick_start(task, "a", now=clock)
        assert set_active_item(session, "b") is False
        assert session.active_item_id == "a"

    def test_minimum_one_minute(self, task, clock):
        with pytest.raises(ValueError, match="at least"):
            quick_start(task, "a", minutes=0, now=clock)

    def test_completed_item_rejected(self, task, clock):
        with pytest.raises(ValueError, match="already completed"):
            quick_start(task, "c", now=clock)

    def test_unknown_item_rejected(self, task, clock):
        with pytest.raises(ValueError):
            quick_start(task, "zz", now=clock)

    def test_reallocate_extends_clock(self, task, clock):
        session = quick_start(task, "a", minutes=5, now=clock)
        result = reallocate(session)
        assert result.extended_clock
        assert session.total_remaining_seconds == 600
        assert task.subtasks[1].allocated_minutes == 0

    def test_time_lands_on_pinned_item(self, task, clock):
        session = quick_start(task, "a", minutes=5, now=clock)
        run_for(session, clock, 150)
        stop(session)

        updated, backlog = resolve(session, Resolution.CLOSE_AND_SAVE)

        assert backlog == []
        assert updated.subtasks[0].actual_minutes == 3
        assert updated.subtasks[1].actual_minutes == 0
        assert updated.actual_duration_minutes == 3
        assert updated.status == TaskStatus.IN_PROGRESS

    def test_migrate_moves_every_unfinished_item(self, task, clock):
        session = quick_start(task, "a", minutes=5, now=clock)
        run_for(session, clock, 60)
        stop(session)

        updated, backlog = resolve(session, Resolution.MIGRATE_REMAINING)

        assert [s.id for s in updated.subtasks] == ["c"]
        assert [(b.title, b.planned_duration_minutes) for b in backlog] == [
            ("Algebra", 5),
            ("Fractions", 0),
        ]
        assert updated.actual_duration_minutes == 1
        assert updated.status == TaskStatus.COMPLETED

    def test_migrate_after_finishing_pinned_item(self, task, clock):
        session = quick_start(task, "a", minutes=5, now=clock)
        run_for(session, clock, 30)
        stop(session)
        complete_item(session, "a")

        updated, backlog = resolve(session, Resolution.MIGRATE_REMAINING)

        assert [b.title for b in backlog] == ["Fractions"]
        assert [s.id for s in updated.subtasks] == ["a", "c"]
        assert updated.status == TaskStatus.COMPLETED


class TestCompleteDirectly:
    def test_marks_complete_without_time(self, task):
        item = complete_directly(task, "a")
        assert item.is_completed
        assert item.actual_minutes == 0
        assert task.status == TaskStatus.TODO

    def test_already_completed(self, task):
        with pytest.raises(ValueError):
            complete_directly(task, "c")
