"""
minirt - a minimal single-threaded cooperative task runtime.

Tasks are coroutines (or generators) that suspend only at explicit
suspension points: ``sleep``, ``sleep_until``, ``yield_now`` and
``join_all``. A ``Runtime`` resumes ready tasks in FIFO order and wakes
sleeping ones from a deadline-ordered queue.

Example:
    >>> from minirt import Runtime, join_all, sleep
    >>>
    >>> async def worker(name, seconds, log):
    ...     await sleep(seconds)
    ...     log.append(name)
    >>>
    >>> log = []
    >>> Runtime().block_on(join_all(worker("a", 0.01, log), worker("b", 0.02, log)))
    [None, None]
    >>> log
    ['a', 'b']
"""

from minirt._result import Err, Ok, Result
from minirt.config import IdleStrategy, RuntimeConfig
from minirt.entry import entrypoint
from minirt.errors import (
    InvalidYieldError,
    MiniRuntimeError,
    RuntimeBusyError,
    TaskError,
    WakerExpiredError,
)
from minirt.poll import PENDING, Pending, Poll, Ready
from minirt.primitives import (
    JoinAll,
    Sleep,
    YieldNow,
    join_all,
    sleep,
    sleep_until,
    yield_now,
)
from minirt.runtime import Runtime, RuntimeResult, RuntimeStats
from minirt.task import Pollable, Task, Waker
from minirt.timers import DeadlineEntry, DeadlineQueue

__version__ = "0.1.0"

__all__ = [
    # Runtime
    "Runtime",
    "RuntimeConfig",
    "RuntimeResult",
    "RuntimeStats",
    "IdleStrategy",
    "entrypoint",
    # Tasks
    "Task",
    "Waker",
    "Pollable",
    "Poll",
    "Ready",
    "Pending",
    "PENDING",
    # Primitives
    "sleep",
    "sleep_until",
    "yield_now",
    "join_all",
    "Sleep",
    "YieldNow",
    "JoinAll",
    # Deadline queue
    "DeadlineEntry",
    "DeadlineQueue",
    # Results
    "Result",
    "Ok",
    "Err",
    # Errors
    "MiniRuntimeError",
    "TaskError",
    "InvalidYieldError",
    "RuntimeBusyError",
    "WakerExpiredError",
]
