"""
Pytest configuration and shared fixtures for the Life Planner tests.

Stores are built directly on an in-memory backend with a fixed clock,
so nothing depends on the wall clock or the filesystem.
"""

from datetime import datetime, timedelta

import pytest

from lifeplanner.services.storage import InMemoryStorage


class FixedClock:
    """A settable "now" for stores; advance() moves it forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now = self.now + timedelta(**delta)


@pytest.fixture
def clock():
    # Monday
    return FixedClock(datetime(2024, 4, 1, 9, 30))


@pytest.fixture
def storage():
    return InMemoryStorage()
