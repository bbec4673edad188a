"""Runtime configuration.

Defaults can be overridden from the environment:
    export MINIRT_IDLE=spin          # busy-spin while only timers are pending
    export MINIRT_BATCH_TIMERS=1     # promote every expired timer per pass
    export MINIRT_DEBUG=1            # debug logging in the demo CLI
"""

from __future__ import annotations

import os
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Literal, get_args

IdleStrategy = Literal["sleep", "spin"]

IDLE_STRATEGIES: tuple[str, ...] = get_args(IdleStrategy)

_TRUTHY = ("1", "true", "yes")


def env_flag(name: str, environ: Mapping[str, str] | None = None) -> bool:
    environ = os.environ if environ is None else environ
    return environ.get(name, "").lower() in _TRUTHY


@dataclass(frozen=True, kw_only=True)
class RuntimeConfig:
    """Knobs for a ``Runtime``.

    Args:
        idle: What the run loop does when only timers are pending.
            ``"sleep"`` parks the thread until the earliest deadline,
            ``"spin"`` re-checks the clock in a busy loop.
        batch_timers: Promote every expired timer per loop pass instead of
            one.
        clock: Monotonic clock in seconds. Deadlines live on this clock.
        sleeper: Blocks the controlling thread for the given seconds.
    """

    idle: IdleStrategy = "sleep"
    batch_timers: bool = False
    clock: Callable[[], float] = field(default=time.monotonic, compare=False)
    sleeper: Callable[[float], None] = field(default=time.sleep, compare=False)

    def __post_init__(self) -> None:
        if self.idle not in IDLE_STRATEGIES:
            raise ValueError(
                f"idle must be one of {', '.join(IDLE_STRATEGIES)}, got {self.idle!r}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides) -> RuntimeConfig:
        environ = os.environ if environ is None else environ
        values = {
            "idle": environ.get("MINIRT_IDLE", "sleep").lower(),
            "batch_timers": env_flag("MINIRT_BATCH_TIMERS", environ),
        }
        values.update(overrides)
        return cls(**values)


__all__ = ["IdleStrategy", "IDLE_STRATEGIES", "RuntimeConfig", "env_flag"]
