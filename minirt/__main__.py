from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
import time
from collections.abc import Iterable

from minirt.config import IDLE_STRATEGIES, RuntimeConfig, env_flag
from minirt.errors import MiniRuntimeError
from minirt.primitives import join_all, sleep
from minirt.runtime import Runtime


async def demo_task(index: int, seconds: float) -> None:
    print(f"Task {index} started")
    await sleep(seconds)
    print(f"Task {index} done")


async def demo_main(first: float, second: float) -> None:
    print("Main task starting...")
    await join_all(demo_task(1, first), demo_task(2, second))


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose or env_flag("MINIRT_DEBUG") else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def handle_demo(args: argparse.Namespace) -> int:
    overrides = {}
    if args.idle is not None:
        overrides["idle"] = args.idle
    if args.batch_timers:
        overrides["batch_timers"] = True
    runtime = Runtime(RuntimeConfig.from_env(**overrides))

    started = time.perf_counter()
    runtime.block_on(demo_main(args.first, args.second), name="main")
    elapsed = time.perf_counter() - started

    if args.format == "json":
        payload = {
            "status": "ok",
            "elapsed": round(elapsed, 6),
            "stats": dataclasses.asdict(runtime.stats),
        }
        print(json.dumps(payload))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minirt", description="Minimal cooperative task runtime"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    demo_parser = subparsers.add_parser(
        "demo",
        help="Run two sleeping tasks concurrently under one root task",
    )
    demo_parser.add_argument("--first", type=float, default=1.0, help="Seconds task 1 sleeps (default: 1.0)")
    demo_parser.add_argument("--second", type=float, default=2.0, help="Seconds task 2 sleeps (default: 2.0)")
    demo_parser.add_argument(
        "--idle",
        choices=IDLE_STRATEGIES,
        default=None,
        help="What the loop does while only timers are pending (default: MINIRT_IDLE or sleep)",
    )
    demo_parser.add_argument(
        "--batch-timers",
        action="store_true",
        help="Promote every expired timer per loop pass",
    )
    demo_parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Append a JSON summary with runtime stats when set to json",
    )
    demo_parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    demo_parser.set_defaults(func=handle_demo)

    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(getattr(args, "verbose", False))
    try:
        return args.func(args)
    except (MiniRuntimeError, ValueError) as exc:
        if getattr(args, "format", "text") == "json":
            payload = {
                "status": "error",
                "error": exc.__class__.__name__,
                "message": str(exc),
            }
            print(json.dumps(payload))
        else:
            print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
