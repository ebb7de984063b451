"""
Rate Limiter - Per-upstream minimum-interval gate.

Every outbound call to a named upstream waits here until enough time has
passed since that upstream's previous call. One instance is created at
process start and shared by all provider clients.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, Mapping, Optional, Union

from anistream.core.models import ProviderName


logger = logging.getLogger(__name__)

UpstreamKey = Union[ProviderName, str]


def _key(provider: UpstreamKey) -> str:
    return provider.value if isinstance(provider, ProviderName) else str(provider)


class RateLimiter:
    """
    Minimum-interval gate keyed by upstream name.

    Concurrent callers for the same upstream are serialized on a per-key
    lock: the holder sleeps until the interval has elapsed, stamps the call
    time and releases the lock, so the next caller recomputes its wait from
    the fresh stamp. Different upstreams use different locks and never wait
    on each other.
    """

    def __init__(
        self,
        intervals_ms: Optional[Mapping[UpstreamKey, int]] = None,
        default_interval_ms: int = 500,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the rate limiter.

        Args:
            intervals_ms: Minimum spacing per upstream in milliseconds
            default_interval_ms: Spacing for upstreams not listed
            clock: Monotonic clock returning seconds
        """
        self._intervals: Dict[str, float] = {}
        self._default_interval = default_interval_ms / 1000.0
        self._last_call: Dict[str, float] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._clock = clock

        for provider, interval in (intervals_ms or {}).items():
            self.set_interval(provider, interval)

    def set_interval(self, provider: UpstreamKey, interval_ms: int) -> None:
        """Set the minimum spacing for an upstream."""
        if interval_ms < 0:
            raise ValueError("interval_ms must not be negative")
        self._intervals[_key(provider)] = interval_ms / 1000.0

    def interval(self, provider: UpstreamKey) -> float:
        """Minimum spacing for an upstream, in seconds."""
        return self._intervals.get(_key(provider), self._default_interval)

    def last_call(self, provider: UpstreamKey) -> Optional[float]:
        """Clock value of the last granted turn, or None if never called."""
        return self._last_call.get(_key(provider))

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def await_turn(self, provider: UpstreamKey) -> float:
        """
        Wait until the upstream may be called again.

        Args:
            provider: Upstream name

        Returns:
            Clock value recorded as this call's timestamp
        """
        key = _key(provider)

        async with self._lock_for(key):
            while True:
                interval = self.interval(key)
                now = self._clock()
                last = self._last_call.get(key)
                if last is None or now - last >= interval:
                    break
                wait = interval - (now - last)
                logger.debug(f"Rate limit for {key}: waiting {wait:.3f}s")
                await asyncio.sleep(wait)

            self._last_call[key] = now
            return now


# Export rate limiter
__all__ = ["RateLimiter", "UpstreamKey"]
