"""
Single-threaded cooperative runtime.

The runtime owns two pools of work:

- ready: FIFO deque of tasks that can be resumed right away
- timers: Deadline Queue of tasks waiting for a wake instant

``block_on`` drains the ready deque completely (including tasks that are
re-queued while draining), then promotes expired timers into the ready
deque, and repeats until both pools are empty.

Usage:
    async def main():
        await sleep(0.5)
        await yield_now()

    Runtime().block_on(main())
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from minirt._result import Err, Ok, Result
from minirt.config import RuntimeConfig
from minirt.errors import MiniRuntimeError, RuntimeBusyError, TaskError
from minirt.poll import Ready
from minirt.task import Task, Waker
from minirt.timers import DeadlineQueue

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RuntimeStats:
    """Counters accumulated over the lifetime of a runtime."""

    spawned: int = 0
    resumptions: int = 0
    completed: int = 0
    timers_registered: int = 0
    timers_promoted: int = 0
    idle_waits: int = 0


@dataclass(frozen=True)
class RuntimeResult(Generic[T]):
    """Result from ``Runtime.run_safe``."""

    result: Result[T]
    task_name: str | None = None

    @property
    def is_ok(self) -> bool:
        return self.result.is_ok()

    @property
    def is_err(self) -> bool:
        return self.result.is_err()

    @property
    def value(self) -> T:
        return self.result.ok()

    @property
    def error(self) -> Exception | None:
        return self.result.err()

    def unwrap(self) -> T:
        """Get value or raise if error."""
        return self.result.unwrap()

    def unwrap_err(self) -> Exception:
        """Get error or raise if ok."""
        return self.result.unwrap_err()


class Runtime:
    """Runs tasks to completion on the calling thread.

    Tasks reach the runtime explicitly: through a closure, or through
    ``waker.runtime`` inside a pollable. There is no process-wide
    "current runtime", so several runtimes can coexist and one can even be
    driven from inside a task of another.
    """

    def __init__(self, config: RuntimeConfig | None = None) -> None:
        self.config = config or RuntimeConfig()
        self.stats = RuntimeStats()
        self._ready: deque[Task] = deque()
        self._timers = DeadlineQueue()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def pending(self) -> int:
        """Number of tasks waiting in either queue."""
        return len(self._ready) + len(self._timers)

    def now(self) -> float:
        return self.config.clock()

    def spawn(self, computation: Any, *, name: str | None = None) -> None:
        """Append a new task to the ready queue tail."""
        self._submit(computation, name)

    def block_on(self, computation: Any, *, name: str | None = None) -> Any:
        """Run ``computation`` and everything it spawns to completion.

        Returns the root computation's output (``None`` for zero-output
        roots). Raises ``TaskError`` if any task raises; outstanding work is
        dropped in that case and the runtime is idle again.
        """
        return self._drive(self._start(computation, name))

    def run_safe(self, computation: Any, *, name: str | None = None) -> RuntimeResult[Any]:
        """Run like ``block_on``, return Result instead of raising."""
        try:
            root = self._start(computation, name)
            value = self._drive(root)
        except TaskError as e:
            cause = e.cause if isinstance(e.cause, Exception) else e
            return RuntimeResult(Err(cause), e.task_name)
        except MiniRuntimeError as e:
            return RuntimeResult(Err(e))
        return RuntimeResult(Ok(value), root.name)

    def _start(self, computation: Any, name: str | None) -> Task:
        if self._running:
            raise RuntimeBusyError(
                "block_on called while this runtime is already running\n"
                "Hint: use runtime.spawn(...) from inside a task instead"
            )
        return self._submit(computation, name)

    def _drive(self, root: Task) -> Any:
        self._running = True
        logger.debug("runtime started with root task %r", root.name)
        try:
            self._run()
        except BaseException:
            self._abandon()
            raise
        finally:
            self._running = False
        logger.debug("runtime idle (resumptions=%d)", self.stats.resumptions)
        return root.result

    def _submit(self, computation: Any, name: str | None) -> Task:
        task = Task(computation, name)
        self._ready.append(task)
        self.stats.spawned += 1
        logger.debug("spawned task %r (ready=%d)", task.name, len(self._ready))
        return task

    def _run(self) -> None:
        while self._ready or self._timers:
            while self._ready:
                task = self._ready.popleft()
                self._resume(task)

            self._promote_timers()

            if not self._ready and self._timers:
                self._idle()

    def _resume(self, task: Task) -> None:
        waker = Waker(self, task)
        self.stats.resumptions += 1
        try:
            result = task.poll(waker)
        except Exception as exc:
            logger.exception("task %r raised", task.name)
            raise TaskError(task.name, exc) from exc
        finally:
            waker.expire()

        if isinstance(result, Ready):
            self.stats.completed += 1
            logger.debug("task %r completed", task.name)
            return

        if waker.deadline is not None and not waker.woken:
            self._timers.push(waker.deadline, task)
            self.stats.timers_registered += 1
            logger.debug("task %r parked until %.6f", task.name, waker.deadline)
        else:
            self._ready.append(task)

    def _promote_timers(self) -> None:
        now = self.now()
        while self._timers and self._timers.peek_min().when <= now:
            entry = self._timers.pop_min()
            self._ready.append(entry.task)
            self.stats.timers_promoted += 1
            logger.debug("timer for task %r expired", entry.task.name)
            if not self.config.batch_timers:
                break

    def _idle(self) -> None:
        delay = self._timers.peek_min().when - self.now()
        if delay <= 0 or self.config.idle == "spin":
            return
        self.stats.idle_waits += 1
        logger.debug("no ready tasks; sleeping %.6fs until next timer", delay)
        self.config.sleeper(delay)

    def _abandon(self) -> None:
        dropped = list(self._ready) + [entry.task for entry in self._timers.clear()]
        self._ready.clear()
        for task in dropped:
            task.close()
        if dropped:
            logger.debug("dropped %d outstanding task(s)", len(dropped))

    def __repr__(self) -> str:
        state = "running" if self._running else "idle"
        return f"Runtime({state}, ready={len(self._ready)}, timers={len(self._timers)})"


__all__ = ["Runtime", "RuntimeStats", "RuntimeResult"]
