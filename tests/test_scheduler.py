"""
Tests for the per-upstream request scheduler (core/scheduler.py)

Coverage:
- FIFO completion order and single in-flight task per upstream
- Failure isolation between queued tasks
- Rate limiter consulted before every task
- Cancellation before and during execution
- Shutdown
"""

import asyncio

import pytest

from anistream.core.rate_limiter import RateLimiter
from anistream.core.scheduler import RequestScheduler


class RecordingRateLimiter(RateLimiter):
    """Rate limiter that remembers every granted timestamp."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.grants = []

    async def await_turn(self, provider):
        stamp = await super().await_turn(provider)
        self.grants.append((str(provider), stamp))
        return stamp


def _make_scheduler(**limiter_kwargs):
    limiter = RecordingRateLimiter(**{"default_interval_ms": 0, **limiter_kwargs})
    return RequestScheduler(limiter), limiter


class TestSchedulerOrdering:
    """Test submission order and serialization."""

    def test_tasks_complete_in_submission_order(self):
        """A's side effects are observable before B starts."""
        async def go():
            scheduler, _ = _make_scheduler()
            events = []

            def make(label, delay):
                async def run():
                    events.append(f"start {label}")
                    await asyncio.sleep(delay)
                    events.append(f"end {label}")
                    return label
                return run

            results = await asyncio.gather(
                scheduler.enqueue("hianime", make("A", 0.05)),
                scheduler.enqueue("hianime", make("B", 0)),
            )
            return results, events

        results, events = asyncio.run(go())
        assert results == ["A", "B"]
        assert events == ["start A", "end A", "start B", "end B"]

    def test_at_most_one_task_in_flight(self):
        async def go():
            scheduler, _ = _make_scheduler()
            in_flight = 0
            peak = 0

            async def run():
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1

            await asyncio.gather(*(scheduler.enqueue("scraper", run) for _ in range(4)))
            return peak, scheduler

        peak, scheduler = asyncio.run(go())
        assert peak == 1
        assert scheduler.pending("scraper") == 0
        assert not scheduler.is_draining("scraper")

    def test_separate_upstreams_are_independent(self):
        """A blocked task on one upstream does not hold up another."""
        async def go():
            scheduler, _ = _make_scheduler()
            gate = asyncio.Event()

            async def blocked():
                await gate.wait()
                return "a"

            async def quick():
                return "b"

            first = asyncio.ensure_future(scheduler.enqueue("hianime", blocked))
            second = await asyncio.wait_for(scheduler.enqueue("scraper", quick), timeout=1)
            gate.set()
            return await first, second

        assert asyncio.run(go()) == ("a", "b")


class TestSchedulerFailures:
    """Test error isolation."""

    def test_failure_rejects_only_its_own_task(self):
        async def go():
            scheduler, _ = _make_scheduler()

            async def failing():
                raise ValueError("upstream exploded")

            async def fine():
                return "ok"

            return await asyncio.gather(
                scheduler.enqueue("hianime", failing),
                scheduler.enqueue("hianime", fine),
                return_exceptions=True,
            )

        failed, succeeded = asyncio.run(go())
        assert isinstance(failed, ValueError)
        assert succeeded == "ok"

    def test_factory_error_is_reported_to_caller(self):
        async def go():
            scheduler, _ = _make_scheduler()

            def broken_factory():
                raise RuntimeError("could not build request")

            with pytest.raises(RuntimeError):
                await scheduler.enqueue("hianime", broken_factory)

            async def fine():
                return 42

            return await scheduler.enqueue("hianime", fine)

        assert asyncio.run(go()) == 42


class TestSchedulerRateLimiting:
    """Test that the worker waits for the rate limiter."""

    def test_limiter_consulted_before_each_task(self):
        async def go():
            scheduler, limiter = _make_scheduler(intervals_ms={"scraper": 50})

            async def run():
                return None

            await asyncio.gather(*(scheduler.enqueue("scraper", run) for _ in range(3)))
            return limiter.grants

        grants = asyncio.run(go())
        assert [key for key, _ in grants] == ["scraper"] * 3
        stamps = [stamp for _, stamp in grants]
        assert all(later - earlier >= 0.05 for earlier, later in zip(stamps, stamps[1:]))


class TestSchedulerCancellation:
    """Test cancellation of waiting and running callers."""

    def test_cancelled_waiter_is_skipped(self):
        async def go():
            scheduler, _ = _make_scheduler()
            gate = asyncio.Event()
            ran = []

            def make(label, wait=False):
                async def run():
                    if wait:
                        await gate.wait()
                    ran.append(label)
                    return label
                return run

            first = asyncio.ensure_future(scheduler.enqueue("hianime", make("A", wait=True)))
            await asyncio.sleep(0.01)

            second = asyncio.ensure_future(scheduler.enqueue("hianime", make("B")))
            await asyncio.sleep(0)
            second.cancel()

            third = asyncio.ensure_future(scheduler.enqueue("hianime", make("C")))
            await asyncio.sleep(0)

            gate.set()
            await asyncio.gather(first, third)
            return ran, second.cancelled()

        ran, second_cancelled = asyncio.run(go())
        assert ran == ["A", "C"]
        assert second_cancelled

    def test_cancelling_caller_cancels_running_task(self):
        async def go():
            scheduler, _ = _make_scheduler()
            saw_cancel = asyncio.Event()

            async def slow():
                try:
                    await asyncio.sleep(10)
                except asyncio.CancelledError:
                    saw_cancel.set()
                    raise

            caller = asyncio.ensure_future(scheduler.enqueue("hianime", slow))
            await asyncio.sleep(0.01)
            caller.cancel()

            await asyncio.wait_for(saw_cancel.wait(), timeout=1)
            return caller.cancelled()

        assert asyncio.run(go())


class TestSchedulerShutdown:
    """Test aclose."""

    def test_aclose_cancels_running_and_queued_tasks(self):
        async def go():
            scheduler, _ = _make_scheduler()

            async def forever():
                await asyncio.sleep(10)

            running = asyncio.ensure_future(scheduler.enqueue("hianime", forever))
            queued = asyncio.ensure_future(scheduler.enqueue("hianime", forever))
            await asyncio.sleep(0.01)

            await scheduler.aclose()
            await asyncio.gather(running, queued, return_exceptions=True)
            return running.cancelled(), queued.cancelled(), scheduler

        running_cancelled, queued_cancelled, scheduler = asyncio.run(go())
        assert running_cancelled
        assert queued_cancelled
        assert not scheduler.is_draining("hianime")

    def test_aclose_on_idle_scheduler(self):
        async def go():
            scheduler, _ = _make_scheduler()
            await scheduler.aclose()
            return scheduler.pending("hianime")

        assert asyncio.run(go()) == 0
