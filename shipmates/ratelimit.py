"""A token-bucket rate limiter pacing websocket traffic."""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Awaitable, Callable

DEFAULT_BURST = 10


class RateLimiter:
    """Allows one event per interval on average, with bursts up to ``burst``."""

    def __init__(
        self,
        interval: float,
        burst: int = DEFAULT_BURST,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        async_sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if interval > 0 and burst < 1:
            raise ValueError("burst must be at least 1")
        self.interval = interval
        self.burst = burst
        self._clock = clock
        self._sleep = sleep
        self._async_sleep = async_sleep
        self._tokens = float(burst)
        self._last: float | None = None
        self._lock = threading.Lock()

    def reserve(self) -> float:
        """Take one token and return how many seconds to wait before acting."""
        if self.interval <= 0:
            return 0.0
        with self._lock:
            now = self._clock()
            if self._last is not None:
                elapsed = max(0.0, now - self._last)
                self._tokens = min(
                    float(self.burst), self._tokens + elapsed / self.interval
                )
            self._last = now
            self._tokens -= 1
            if self._tokens >= 0:
                return 0.0
            return -self._tokens * self.interval

    def wait(self) -> None:
        """Block until an event is allowed."""
        delay = self.reserve()
        if delay > 0:
            self._sleep(delay)

    async def wait_async(self) -> None:
        """Wait without blocking the event loop until an event is allowed."""
        delay = self.reserve()
        if delay > 0:
            await self._async_sleep(delay)