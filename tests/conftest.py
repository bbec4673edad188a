"""
Shared fixtures for minirt tests.

Timed tests run against a manual clock: the runtime's sleeper advances the
clock instead of blocking, so deadline ordering is exact and tests finish
instantly.
"""

from __future__ import annotations

import pytest

from minirt import Runtime, RuntimeConfig


class FakeClock:
    """Manual monotonic clock whose ``sleep`` advances time."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class TickingClock:
    """Clock that moves forward by ``step`` every time it is read."""

    def __init__(self, step: float = 0.25) -> None:
        self.now = 0.0
        self.step = step
        self.reads = 0

    def __call__(self) -> float:
        self.reads += 1
        self.now += self.step
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config(clock: FakeClock) -> RuntimeConfig:
    return RuntimeConfig(clock=clock, sleeper=clock.sleep)


@pytest.fixture
def runtime(config: RuntimeConfig) -> Runtime:
    return Runtime(config)


@pytest.fixture
def ticking_clock() -> TickingClock:
    return TickingClock(step=0.25)
