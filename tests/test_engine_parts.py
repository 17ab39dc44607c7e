"""Tests for the ledger, clock, selector and reallocation policy."""

import pytest

from conftest import ManualClock
from focusbank.core.clock import SessionClock
from focusbank.core.ledger import Ledger, seconds_to_minutes
from focusbank.core.reallocation import EXTEND_SECONDS, plan_extension
from focusbank.core.selector import (
    can_activate,
    default_active_id,
    first_incomplete,
    next_incomplete_after,
)
from focusbank.core.tasks import WorkItem


def items(*specs):
    """Build work items from (id, allocated, completed) tuples."""
    return [
        WorkItem(id=i, title=i.upper(), allocated_minutes=alloc, is_completed=done)
        for i, alloc, done in specs
    ]


class TestLedger:
    def test_seconds_to_minutes_rounds_up(self):
        assert seconds_to_minutes(0) == 0
        assert seconds_to_minutes(1) == 1
        assert seconds_to_minutes(60) == 1
        assert seconds_to_minutes(61) == 2

    def test_record_and_flush(self):
        ledger = Ledger()
        work = items(("a", 10, False), ("b", 10, False))
        for _ in range(61):
            ledger.record_second("a")

        added = ledger.flush(work)

        assert added == {"a": 2}
        assert work[0].actual_minutes == 2
        assert work[1].actual_minutes == 0
        assert ledger.pending_seconds("a") == 0

    def test_flush_is_idempotent(self):
        ledger = Ledger()
        work = items(("a", 10, False))
        ledger.record_second("a")
        ledger.flush(work)
        assert ledger.flush(work) == {}
        assert work[0].actual_minutes == 1

    def test_task_level_seconds(self):
        ledger = Ledger()
        for _ in range(30):
            ledger.record_second(None)
        added = ledger.flush([])
        assert added == {None: 1}
        assert ledger.pending_seconds(None) == 0

    def test_flush_clears_every_key(self):
        ledger = Ledger()
        work = items(("a", 10, False), ("b", 10, False))
        ledger.record_second("b")
        ledger.record_second(None)

        assert ledger.flush(work) == {"b": 1, None: 1}
        assert ledger.total_pending() == 0
        assert [w.actual_minutes for w in work] == [0, 1]

    def test_separate_flushes_round_up_each_time(self):
        # Two 40s spans flushed apart count as two minutes.
        ledger = Ledger()
        work = items(("a", 10, False))
        for _ in range(40):
            ledger.record_second("a")
        ledger.flush(work)
        for _ in range(40):
            ledger.record_second("a")
        ledger.flush(work)
        assert work[0].actual_minutes == 2


class TestSessionClock:
    @pytest.fixture
    def time_source(self):
        return ManualClock()

    def test_zero_duration_never_runs(self, time_source):
        clock = SessionClock(time_source)
        assert clock.start(0) is False
        assert clock.is_expired
        assert clock.tick() == 0

    def test_remaining_follows_time_source(self, time_source):
        clock = SessionClock(time_source)
        clock.start(10)
        time_source.advance(4)
        assert clock.remaining_seconds == 6
        assert clock.tick() == 4

    def test_stops_at_zero(self, time_source):
        clock = SessionClock(time_source)
        clock.start(3)
        time_source.advance(10)
        assert clock.tick() == 3
        assert not clock.is_running
        assert clock.remaining_seconds == 0

    def test_extend(self, time_source):
        clock = SessionClock(time_source)
        clock.start(60)
        clock.extend(300)
        assert clock.remaining_seconds == 360

    def test_pause_resume(self, time_source):
        clock = SessionClock(time_source)
        clock.start(60)
        time_source.advance(5)
        clock.pause()
        time_source.advance(100)
        assert clock.tick() == 0
        assert clock.remaining_seconds == 55
        clock.resume()
        time_source.advance(1)
        assert clock.tick() == 6
        assert clock.snapshot().remaining_seconds == 54


class TestSelector:
    def test_first_incomplete_in_list_order(self):
        work = items(("a", 0, True), ("b", 0, False), ("c", 0, False))
        assert first_incomplete(work).id == "b"
        assert default_active_id(work) == "b"

    def test_none_when_all_complete(self):
        work = items(("a", 0, True))
        assert first_incomplete(work) is None
        assert default_active_id(work) is None

    def test_next_incomplete_skips_completed(self):
        work = items(("a", 0, False), ("b", 0, True), ("c", 0, False))
        assert next_incomplete_after(work, work[0]).id == "c"
        assert next_incomplete_after(work, work[2]) is None

    def test_can_activate(self):
        work = items(("a", 0, False), ("b", 0, True))
        assert can_activate(work, "a")
        assert not can_activate(work, "b")
        assert not can_activate(work, "x")
        assert not can_activate(work, None)


class TestPlanExtension:
    def test_moves_five_minutes(self):
        work = items(("a", 20, False), ("b", 10, False))
        result = plan_extension(work)
        assert [w.allocated_minutes for w in work] == [25, 5]
        assert result.extended_item_id == "a"
        assert result.reduced_item_id == "b"
        assert result.minutes_taken == 5
        assert not result.extended_clock

    def test_floor_at_zero_without_recovering_shortfall(self):
        work = items(("a", 20, False), ("b", 3, False), ("c", 10, False))
        result = plan_extension(work)
        assert [w.allocated_minutes for w in work] == [25, 0, 10]
        assert result.minutes_taken == 3

    def test_zero_next_allocation_stays_zero(self):
        work = items(("a", 1, False), ("b", 0, False))
        plan_extension(work)
        assert [w.allocated_minutes for w in work] == [6, 0]

    def test_current_is_first_incomplete_not_first_item(self):
        work = items(("a", 20, True), ("b", 10, False), ("c", 10, True), ("d", 10, False))
        plan_extension(work)
        assert [w.allocated_minutes for w in work] == [20, 15, 10, 5]

    def test_single_incomplete_asks_for_clock(self):
        work = items(("a", 20, True), ("b", 10, False))
        result = plan_extension(work)
        assert result.extended_clock
        assert result.clock_extension_seconds == EXTEND_SECONDS
        assert [w.allocated_minutes for w in work] == [20, 10]

    def test_no_items_asks_for_clock(self):
        assert plan_extension([]).clock_extension_seconds == 300

    def test_repeated_extensions_never_negative(self):
        work = items(("a", 0, False), ("b", 12, False))
        for _ in range(5):
            plan_extension(work)
        assert work[1].allocated_minutes == 0
        assert work[0].allocated_minutes == 25
