"""Shared fixtures."""

import pytest

from focusbank.core.session import Session, tick


class ManualClock:
    """Time source that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def run_for(session: Session, clock: ManualClock, seconds: int) -> None:
    """Tick once per simulated second."""
    for _ in range(seconds):
        clock.advance(1)
        tick(session)


@pytest.fixture
def clock():
    return ManualClock()
