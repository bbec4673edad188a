from __future__ import annotations

from typing import Any


class MiniRuntimeError(Exception):
    """Base class for errors raised by the minirt runtime."""


class TaskError(MiniRuntimeError):
    """Raised out of ``block_on`` when a task raised during its resumption.

    The runtime drops all outstanding work before raising, so the runtime is
    idle again and can be reused.
    """

    def __init__(self, task_name: str, cause: BaseException) -> None:
        super().__init__(f"Task {task_name!r} failed: {type(cause).__name__}: {cause}")
        self.__cause__ = cause
        self.task_name = task_name
        self.cause = cause


class InvalidYieldError(MiniRuntimeError, TypeError):
    """A task yielded something that is neither a pollable nor ``None``."""

    def __init__(self, task_name: str, value: Any) -> None:
        self.task_name = task_name
        self.value = value
        super().__init__(
            f"Task {task_name!r} yielded {type(value).__name__} {value!r}\n"
            "Hint: await a minirt primitive (sleep, yield_now, join_all) or any object "
            "with a poll(waker) method"
        )


class RuntimeBusyError(MiniRuntimeError):
    """``block_on`` was called on a runtime that is already running."""


class WakerExpiredError(MiniRuntimeError):
    """A waker was used after the resumption it was created for had ended."""


__all__ = [
    "MiniRuntimeError",
    "TaskError",
    "InvalidYieldError",
    "RuntimeBusyError",
    "WakerExpiredError",
]
