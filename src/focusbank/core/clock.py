"""Deadline-based countdown clock. The owner calls tick() on its own cadence."""

import time
from dataclasses import dataclass
from typing import Callable

TimeSource = Callable[[], float]


@dataclass
class ClockSnapshot:
    total_seconds: int
    remaining_seconds: int
    is_running: bool
    is_paused: bool
    is_expired: bool


class SessionClock:
    """
    Single countdown for a focus session.

    Remaining time is derived from a captured start time and the injected
    time source rather than from counting callbacks, so a delayed tick
    catches up instead of drifting. Each tick reports the whole seconds
    that passed since the previous one.
    """

    def __init__(self, now: TimeSource = time.monotonic):
        self._now = now
        self.total_seconds = 0
        self._started_at: float | None = None
        self._paused_at: float | None = None
        self._paused_total = 0.0
        self._consumed = 0
        self.is_running = False

    def start(self, total_seconds: int) -> bool:
        """
        Start counting down. Returns False for the zero-duration boundary,
        in which case the clock never runs.
        """
        self.total_seconds = max(0, int(total_seconds))
        self._started_at = self._now()
        self._paused_at = None
        self._paused_total = 0.0
        self._consumed = 0
        self.is_running = self.total_seconds > 0
        return self.is_running

    def _elapsed(self) -> int:
        if self._started_at is None:
            return 0
        reference = self._paused_at if self._paused_at is not None else self._now()
        elapsed = reference - self._started_at - self._paused_total
        return min(self.total_seconds, max(0, int(elapsed)))

    @property
    def is_paused(self) -> bool:
        return self._paused_at is not None

    @property
    def remaining_seconds(self) -> int:
        return max(0, self.total_seconds - self._elapsed())

    @property
    def is_expired(self) -> bool:
        return self._started_at is not None and self.remaining_seconds == 0

    def tick(self) -> int:
        """Whole seconds elapsed since the last tick (0 while paused or stopped)."""
        if not self.is_running or self.is_paused:
            return 0
        due = self._elapsed() - self._consumed
        self._consumed += due
        if self.remaining_seconds == 0:
            self.is_running = False
        return due

    def stop(self) -> int:
        """Stop the clock, returning any whole seconds not yet collected by tick()."""
        if self.is_paused:
            # Collect up to the pause point; the paused span is never counted.
            due = self._elapsed() - self._consumed
            self._consumed += due
            self.is_running = False
            return due
        due = self.tick()
        self.is_running = False
        return due

    def extend(self, seconds: int) -> None:
        """Push the deadline out."""
        self.total_seconds += seconds

    def pause(self) -> None:
        if self.is_running and not self.is_paused:
            self._paused_at = self._now()

    def resume(self) -> None:
        if self._paused_at is None:
            return
        self._paused_total += self._now() - self._paused_at
        self._paused_at = None

    def snapshot(self) -> ClockSnapshot:
        return ClockSnapshot(
            total_seconds=self.total_seconds,
            remaining_seconds=self.remaining_seconds,
            is_running=self.is_running,
            is_paused=self.is_paused,
            is_expired=self.is_expired,
        )
