"""
Request Scheduler - FIFO single-worker queue per upstream.

Upstreams that forbid concurrent requests get all of their calls funnelled
through here. Each upstream has its own queue and at most one worker
draining it; the worker waits for the rate limiter before every task, so
submission order and call spacing are both preserved.
"""

import asyncio
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, Set, Tuple, TypeVar

from anistream.core.rate_limiter import RateLimiter, UpstreamKey, _key


logger = logging.getLogger(__name__)

T = TypeVar("T")
TaskFactory = Callable[[], Awaitable[Any]]
_Entry = Tuple[TaskFactory, "asyncio.Future[Any]"]


class RequestScheduler:
    """
    Serializes calls to upstreams that allow one request at a time.

    ``enqueue`` appends to the upstream's queue and returns the task's
    result once the worker has run it. A failing task rejects only its own
    future. Callers that are cancelled before their task starts are skipped;
    a cancelled caller whose task is already running has that task cancelled.
    """

    def __init__(self, rate_limiter: RateLimiter):
        """
        Initialize the scheduler.

        Args:
            rate_limiter: Shared rate limiter consulted before each task
        """
        self.rate_limiter = rate_limiter
        self._queues: Dict[str, Deque[_Entry]] = {}
        self._draining: Set[str] = set()
        self._workers: Dict[str, "asyncio.Task[None]"] = {}

    def pending(self, provider: UpstreamKey) -> int:
        """Number of queued tasks not yet started for an upstream."""
        return len(self._queues.get(_key(provider), ()))

    def is_draining(self, provider: UpstreamKey) -> bool:
        """Whether a worker is currently draining the upstream's queue."""
        return _key(provider) in self._draining

    async def enqueue(self, provider: UpstreamKey, task: Callable[[], Awaitable[T]]) -> T:
        """
        Queue a task for an upstream and wait for its result.

        Args:
            provider: Upstream name
            task: Zero-argument callable returning the awaitable to run

        Returns:
            The task's result

        Raises:
            Whatever the task raised
        """
        key = _key(provider)
        loop = asyncio.get_running_loop()
        future: "asyncio.Future[T]" = loop.create_future()

        self._queues.setdefault(key, deque()).append((task, future))

        if key not in self._draining:
            self._draining.add(key)
            self._workers[key] = loop.create_task(self._drain(key), name=f"scheduler-{key}")

        return await future

    async def _drain(self, key: str) -> None:
        """Run queued tasks for one upstream until its queue is empty."""
        queue = self._queues[key]
        try:
            while queue:
                factory, future = queue.popleft()
                if future.done():
                    # caller gave up before the task started
                    continue

                try:
                    await self.rate_limiter.await_turn(key)
                except asyncio.CancelledError:
                    future.cancel()
                    raise
                if future.done():
                    continue

                await self._run(key, factory, future)
        finally:
            self._draining.discard(key)
            self._workers.pop(key, None)

    async def _run(self, key: str, factory: TaskFactory, future: "asyncio.Future[Any]") -> None:
        try:
            running = asyncio.ensure_future(factory())
        except Exception as e:
            future.set_exception(e)
            return

        def _propagate_cancel(fut: "asyncio.Future[Any]") -> None:
            if fut.cancelled() and not running.done():
                running.cancel()

        future.add_done_callback(_propagate_cancel)
        try:
            await asyncio.wait({running})
        except asyncio.CancelledError:
            running.cancel()
            future.cancel()
            raise
        finally:
            future.remove_done_callback(_propagate_cancel)

        if future.done():
            if not running.cancelled() and running.exception() is not None:
                logger.debug(f"Dropped result of abandoned task on {key}: {running.exception()}")
            return

        if running.cancelled():
            future.cancel()
        elif running.exception() is not None:
            future.set_exception(running.exception())
        else:
            future.set_result(running.result())

    async def aclose(self) -> None:
        """Cancel workers and reject every task still waiting in a queue."""
        for queue in self._queues.values():
            while queue:
                _, future = queue.popleft()
                future.cancel()

        workers = list(self._workers.values())
        for worker in workers:
            worker.cancel()
        if workers:
            await asyncio.gather(*workers, return_exceptions=True)

        self._workers.clear()
        self._draining.clear()


# Export scheduler
__all__ = ["RequestScheduler", "TaskFactory"]
