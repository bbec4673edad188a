"""Tests for Task driving and Waker bookkeeping, polled by hand."""

from __future__ import annotations

import pytest

from minirt import (
    PENDING,
    InvalidYieldError,
    Pending,
    Ready,
    Task,
    Waker,
    WakerExpiredError,
    sleep,
    yield_now,
)
from minirt.primitives import Primitive


class Failing(Primitive):
    def poll(self, waker):
        raise LookupError("pollable broke")


class TestTaskDriving:
    def test_coroutine_runs_until_first_pending(self, runtime):
        log = []

        async def work():
            log.append("start")
            await yield_now()
            log.append("end")
            return "result"

        task = Task(work())

        assert isinstance(task.poll(Waker(runtime, task)), Pending)
        assert log == ["start"]

        assert task.poll(Waker(runtime, task)) == Ready("result")
        assert log == ["start", "end"]
        assert task.done
        assert task.result == "result"

    def test_ready_primitives_do_not_suspend(self, runtime):
        async def work():
            await sleep(0)
            await sleep(-1.0)
            return "same resumption"

        task = Task(work())

        assert task.poll(Waker(runtime, task)) == Ready("same resumption")

    def test_bare_yield_is_a_plain_suspension(self, runtime):
        def gen():
            yield
            return 7

        task = Task(gen())
        waker = Waker(runtime, task)

        assert task.poll(waker) is PENDING
        assert not waker.woken
        assert waker.deadline is None
        assert task.poll(Waker(runtime, task)) == Ready(7)

    def test_yield_from_primitive(self, runtime, clock):
        def gen():
            yield from sleep(2.0)
            return clock()

        task = Task(gen())
        waker = Waker(runtime, task)

        assert task.poll(waker) is PENDING
        assert waker.deadline == 2.0

        clock.advance(2.0)
        assert task.poll(Waker(runtime, task)) == Ready(2.0)

    def test_pollable_task_delegates(self, runtime):
        task = Task(yield_now())

        assert task.poll(Waker(runtime, task)) is PENDING
        assert task.poll(Waker(runtime, task)) == Ready()
        assert task.done

    def test_invalid_yield_is_thrown_into_computation(self, runtime):
        caught = []

        def gen():
            try:
                yield 42
            except InvalidYieldError as exc:
                caught.append(exc.value)
            return "recovered"

        task = Task(gen(), name="picky")

        assert task.poll(Waker(runtime, task)) == Ready("recovered")
        assert caught == [42]

    def test_unhandled_invalid_yield_propagates(self, runtime):
        def gen():
            yield "not a pollable"

        task = Task(gen(), name="bad")

        with pytest.raises(InvalidYieldError, match="Task 'bad' yielded str"):
            task.poll(Waker(runtime, task))
        assert task.done

    def test_pollable_error_is_thrown_into_computation(self, runtime):
        async def work():
            try:
                await Failing()
            except LookupError as exc:
                return f"caught {exc}"

        task = Task(work())

        assert task.poll(Waker(runtime, task)) == Ready("caught pollable broke")

    def test_poll_after_completion_raises(self, runtime):
        async def work():
            return None

        task = Task(work(), name="once")
        task.poll(Waker(runtime, task))

        with pytest.raises(RuntimeError, match="already completed"):
            task.poll(Waker(runtime, task))

    def test_close_runs_cleanup(self, runtime):
        log = []

        async def work():
            try:
                await sleep(10.0)
            finally:
                log.append("cleanup")

        task = Task(work())
        task.poll(Waker(runtime, task))
        task.close()

        assert log == ["cleanup"]
        assert task.done
        task.close()
        assert log == ["cleanup"]

    def test_default_names(self):
        async def named_work():
            return None

        coro = named_work()
        assert Task(coro).name.endswith("named_work")
        coro.close()
        assert Task(yield_now()).name == "YieldNow"
        assert Task(yield_now(), name="custom").name == "custom"

    def test_repr(self):
        task = Task(yield_now(), name="t")
        assert repr(task) == "Task('t', pending)"


class TestWaker:
    def test_exposes_runtime_and_clock(self, runtime, clock):
        clock.advance(4.5)
        waker = Waker(runtime)

        assert waker.runtime is runtime
        assert waker.now() == 4.5
        assert waker.task is None

    def test_wake_at_keeps_earliest(self, runtime):
        waker = Waker(runtime)
        waker.wake_at(5.0)
        waker.wake_at(9.0)
        waker.wake_at(3.0)

        assert waker.deadline == 3.0
        assert not waker.woken

    def test_wake_sets_flag(self, runtime):
        waker = Waker(runtime)
        waker.wake()

        assert waker.woken

    def test_expired_waker_rejects_requests(self, runtime):
        task = Task(yield_now(), name="late")
        waker = Waker(runtime, task)
        waker.expire()

        assert not waker.active
        with pytest.raises(WakerExpiredError, match="'late'"):
            waker.wake()
        with pytest.raises(WakerExpiredError):
            waker.wake_at(1.0)

    def test_runtime_expires_waker_after_resumption(self, runtime):
        kept = []

        class Hoarder:
            def poll(self, waker):
                kept.append(waker)
                return Ready()

        runtime.block_on(Hoarder())

        assert not kept[0].active
