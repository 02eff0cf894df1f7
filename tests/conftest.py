"""Shared test fixtures for the bionic_reader test suite.

WHY: The synchronizer, clock and CLI tests all need deterministic time
and deterministic frames. Centralizing the fake time source, the manual
scheduler and a recording sink keeps every playback test reproducible
without sleeping.

HOW: FakeTime is a callable time source whose value only moves when a
test calls advance(). ManualFrameScheduler emits frames on demand. A
MagicMock stands in for the host's active-word sink so tests can assert
on the exact sequence of reported indices.

RULES:
- No test depends on wall-clock time
- BIONIC_* environment variables are cleared before every test so a
  developer's .env cannot change expected values
"""

from __future__ import annotations

import os
from unittest.mock import MagicMock

import pytest

from bionic_reader.playback.clock import SimulatedMediaClock
from bionic_reader.playback.scheduler import ManualFrameScheduler


class FakeTime:
    """Monotonic time source in seconds that moves only when told to."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture(autouse=True)
def _clean_bionic_env(monkeypatch):
    """Remove BIONIC_* overrides so defaults apply in every test."""
    for name in list(os.environ):
        if name.startswith("BIONIC_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def clock(fake_time):
    """A simulated media clock with unknown duration, driven by fake_time."""
    return SimulatedMediaClock(time_source=fake_time)


@pytest.fixture
def scheduler():
    return ManualFrameScheduler()


@pytest.fixture
def sink():
    """Recording active-word sink."""
    return MagicMock()
