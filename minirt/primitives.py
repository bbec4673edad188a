"""Suspension primitives: sleep, sleep_until, yield_now, join_all.

Each primitive is a small single-use state machine with a
``poll(waker) -> Poll`` method. Coroutine tasks ``await`` them, generator
tasks ``yield`` them:

    async def worker():
        await sleep(0.5)
        await yield_now()

    def legacy_worker():
        yield sleep(0.5)
        yield yield_now()

Primitives never look up a runtime on their own. Everything they need
(the clock, the way to ask for rescheduling) comes from the waker they are
polled with.
"""

from __future__ import annotations

from collections.abc import Generator
from datetime import timedelta
from typing import Any

from minirt.poll import PENDING, Poll, Ready
from minirt.task import Task, Waker


def to_seconds(duration: float | timedelta) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    if isinstance(duration, (int, float)) and not isinstance(duration, bool):
        return float(duration)
    raise TypeError(
        f"duration must be seconds (int/float) or timedelta, got {type(duration).__name__}"
    )


class Primitive:
    """Makes a pollable usable with ``await`` and ``yield from``."""

    __slots__ = ()

    def poll(self, waker: Waker) -> Poll:
        raise NotImplementedError

    def __await__(self) -> Generator[Any, Any, Any]:
        return (yield self)

    __iter__ = __await__


class Sleep(Primitive):
    """Completes once the runtime clock reaches the deadline.

    The deadline is fixed on the first poll (``now + duration``) unless an
    absolute deadline was given, and it is the only state that survives
    between polls.
    """

    __slots__ = ("duration", "deadline")

    def __init__(self, duration: float | timedelta = 0.0, *, deadline: float | None = None) -> None:
        self.duration = to_seconds(duration)
        self.deadline = deadline

    def poll(self, waker: Waker) -> Poll:
        now = waker.now()
        if self.deadline is None:
            self.deadline = now + self.duration
        if now >= self.deadline:
            return Ready()
        waker.wake_at(self.deadline)
        return PENDING

    def __repr__(self) -> str:
        return f"Sleep(duration={self.duration}, deadline={self.deadline})"


class YieldNow(Primitive):
    """Pending on the first poll, ready on the second."""

    __slots__ = ("_yielded",)

    def __init__(self) -> None:
        self._yielded = False

    def poll(self, waker: Waker) -> Poll:
        if self._yielded:
            return Ready()
        self._yielded = True
        waker.wake()
        return PENDING

    def __repr__(self) -> str:
        return f"YieldNow(yielded={self._yielded})"


class JoinAll(Primitive):
    """Completes when every sub-computation has completed.

    Each poll resumes every unfinished child once, in argument order.
    Children therefore interleave on the one thread. Every child gets a
    waker of its own; once it reports ``Pending`` its request is merged
    into the owner's waker, and a child that asked for nothing counts as
    ``wake()`` (eager repoll), exactly as a standalone task would.
    The output is the list of child outputs in argument order.
    """

    __slots__ = ("_children",)

    def __init__(self, *computations: Any) -> None:
        self._children = [
            Task(computation, name=f"join_all[{index}]")
            for index, computation in enumerate(computations)
        ]

    @property
    def remaining(self) -> int:
        return sum(1 for child in self._children if not child.done)

    def poll(self, waker: Waker) -> Poll:
        for child in self._children:
            if not child.done:
                self._poll_child(child, waker)
        if all(child.done for child in self._children):
            return Ready([child.result for child in self._children])
        return PENDING

    @staticmethod
    def _poll_child(child: Task, waker: Waker) -> None:
        child_waker = Waker(waker.runtime, child)
        try:
            result = child.poll(child_waker)
        finally:
            child_waker.expire()
        if isinstance(result, Ready):
            return
        if child_waker.deadline is not None and not child_waker.woken:
            waker.wake_at(child_waker.deadline)
        else:
            waker.wake()

    def close(self) -> None:
        for child in self._children:
            child.close()

    def __repr__(self) -> str:
        return f"JoinAll(children={len(self._children)}, remaining={self.remaining})"


def sleep(duration: float | timedelta) -> Sleep:
    """Suspend for at least ``duration`` (seconds or timedelta).

    Zero or negative durations complete on the first poll without ever
    touching the Deadline Queue.
    """
    return Sleep(duration)


def sleep_until(deadline: float) -> Sleep:
    """Suspend until the runtime clock reads at least ``deadline``.

    ``deadline`` is on the runtime's clock (``time.monotonic`` by default,
    see ``Runtime.now``).
    """
    return Sleep(deadline=deadline)


def yield_now() -> YieldNow:
    """Suspend exactly once, resuming from the Ready Queue tail."""
    return YieldNow()


def join_all(*computations: Any) -> JoinAll:
    return JoinAll(*computations)


__all__ = [
    "Primitive",
    "Sleep",
    "YieldNow",
    "JoinAll",
    "sleep",
    "sleep_until",
    "yield_now",
    "join_all",
    "to_seconds",
]
