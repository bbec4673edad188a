"""Entry-point sugar.

    @entrypoint
    async def main(runtime):
        runtime.spawn(background())
        await sleep(1.0)

    if __name__ == "__main__":
        main()
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any

from minirt.config import RuntimeConfig
from minirt.runtime import Runtime


def entrypoint(
    fn: Callable[[Runtime], Any] | None = None,
    *,
    config: RuntimeConfig | None = None,
) -> Any:
    """Turn ``async def main(runtime)`` into a zero-argument runner.

    Each call builds a fresh ``Runtime`` (configured from the environment
    unless ``config`` is given), passes it to ``fn`` and blocks on the
    resulting computation. Returns the computation's output.
    """

    def decorate(func: Callable[[Runtime], Any]) -> Callable[[], Any]:
        @functools.wraps(func)
        def runner() -> Any:
            runtime = Runtime(config or RuntimeConfig.from_env())
            return runtime.block_on(func(runtime), name=func.__qualname__)

        return runner

    if fn is None:
        return decorate
    return decorate(fn)


__all__ = ["entrypoint"]
