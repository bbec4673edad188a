"""
Resumable tasks and the waker handed to them on every resumption.

A task wraps one of three kinds of computation:

- a coroutine object (``async def``) that awaits minirt primitives,
- a generator object that yields minirt primitives (or bare ``None``),
- any *pollable*: an object with a ``poll(waker) -> Poll`` method.

Coroutines and generators are driven the same way. Whenever the
computation yields a pollable, the task polls it right away with the
current waker. A ``Ready`` pollable sends its value back in and the
computation keeps running inside the same resumption; a ``Pending`` one
parks the task on that pollable, and the next resumption polls it again.
"""

from __future__ import annotations

import inspect
from collections.abc import Coroutine, Generator
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from minirt.errors import InvalidYieldError, WakerExpiredError
from minirt.poll import PENDING, Poll, Ready

if TYPE_CHECKING:
    from minirt.runtime import Runtime


@runtime_checkable
class Pollable(Protocol):
    """Anything the runtime can resume one step at a time."""

    def poll(self, waker: Waker) -> Poll:
        ...


def is_pollable(obj: Any) -> bool:
    return callable(getattr(obj, "poll", None))


class Waker:
    """Completion signal for a single resumption of a single task.

    The waker is the explicit context a suspension primitive receives: it
    exposes the runtime that is resuming the task (for the clock) and
    records how the task wants to be rescheduled once it reports
    ``Pending``. The runtime reads the request back after the poll returns.

    Requests made during one resumption are merged: any ``wake()`` wins
    over timed requests, and several ``wake_at`` calls keep the earliest
    deadline, so the task lands in exactly one queue.
    """

    __slots__ = ("_runtime", "_task", "_active", "woken", "deadline")

    def __init__(self, runtime: Runtime, task: Task | None = None) -> None:
        self._runtime = runtime
        self._task = task
        self._active = True
        self.woken = False
        self.deadline: float | None = None

    @property
    def runtime(self) -> Runtime:
        return self._runtime

    @property
    def task(self) -> Task | None:
        return self._task

    @property
    def active(self) -> bool:
        return self._active

    def now(self) -> float:
        """Current reading of the runtime's clock."""
        return self._runtime.now()

    def wake(self) -> None:
        """Ask to be resumed again from the Ready Queue tail."""
        self._check_active()
        self.woken = True

    def wake_at(self, deadline: float) -> None:
        """Ask to be resumed no earlier than ``deadline`` (runtime clock)."""
        self._check_active()
        if self.deadline is None or deadline < self.deadline:
            self.deadline = deadline

    def expire(self) -> None:
        self._active = False

    def _check_active(self) -> None:
        if not self._active:
            name = self._task.name if self._task is not None else "<detached>"
            raise WakerExpiredError(
                f"Waker for task {name!r} used after its resumption ended"
            )

    def __repr__(self) -> str:
        name = self._task.name if self._task is not None else None
        return (
            f"Waker(task={name!r}, active={self._active}, "
            f"woken={self.woken}, deadline={self.deadline})"
        )


class Task:
    """A unit of suspendable computation owned by exactly one queue at a time."""

    def __init__(self, computation: Any, name: str | None = None) -> None:
        self._coro: Coroutine[Any, Any, Any] | Generator[Any, Any, Any] | None = None
        self._pollable: Pollable | None = None

        if inspect.iscoroutine(computation) or inspect.isgenerator(computation):
            self._coro = computation
            default_name = getattr(computation, "__qualname__", type(computation).__name__)
        elif is_pollable(computation):
            self._pollable = computation
            default_name = type(computation).__name__
        elif inspect.iscoroutinefunction(computation) or inspect.isgeneratorfunction(computation):
            raise TypeError(
                f"Expected a computation, got the function {computation.__qualname__!r}\n"
                f"Hint: call it first, e.g. spawn({computation.__name__}())"
            )
        else:
            raise TypeError(
                f"Cannot run {type(computation).__name__} as a task; expected a "
                "coroutine, a generator or an object with a poll(waker) method"
            )

        self.name = name or default_name
        self._awaiting: Pollable | None = None
        self._done = False
        self.result: Any = None

    @property
    def done(self) -> bool:
        return self._done

    def poll(self, waker: Waker) -> Poll:
        """Run the computation from its last suspension point to the next one."""
        if self._done:
            raise RuntimeError(f"Task {self.name!r} already completed")

        if self._pollable is not None:
            result = self._pollable.poll(waker)
            if isinstance(result, Ready):
                self._finish(result.value)
            return result

        send_value: Any = None
        error: BaseException | None = None
        while True:
            if self._awaiting is not None:
                try:
                    result = self._awaiting.poll(waker)
                except Exception as exc:
                    self._release_awaiting()
                    error = exc
                else:
                    if not isinstance(result, Ready):
                        return PENDING
                    self._awaiting = None
                    send_value = result.value

            try:
                if error is not None:
                    exc, error = error, None
                    yielded = self._coro.throw(exc)
                else:
                    yielded = self._coro.send(send_value)
            except StopIteration as stop:
                self._finish(stop.value)
                return Ready(stop.value)
            except BaseException:
                self._done = True
                raise

            send_value = None
            if yielded is None:
                # bare yield: plain cooperative suspension
                return PENDING
            if is_pollable(yielded):
                self._awaiting = yielded
            else:
                error = InvalidYieldError(self.name, yielded)

    def close(self) -> None:
        """Release an unfinished computation without resuming it."""
        if self._done:
            return
        self._done = True
        self._release_awaiting()
        if self._coro is not None:
            self._coro.close()

    def _release_awaiting(self) -> None:
        awaiting, self._awaiting = self._awaiting, None
        close = getattr(awaiting, "close", None)
        if callable(close):
            close()

    def _finish(self, value: Any) -> None:
        self._done = True
        self.result = value

    def __repr__(self) -> str:
        state = "done" if self._done else "pending"
        return f"Task({self.name!r}, {state})"


__all__ = ["Pollable", "Waker", "Task", "is_pollable"]
