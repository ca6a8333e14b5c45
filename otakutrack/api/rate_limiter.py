"""
Provides an adaptive rate limiter to stay within the catalog API's request quotas.
"""

import asyncio
import logging
import time
from collections import deque

log = logging.getLogger(__name__)


class AdaptiveRateLimiter:
    """
    Spaces calls to honour a per-second rate and a per-minute quota, and
    slows down when the API answers with 429 errors.
    """

    def __init__(
        self, calls_per_second: float = 3.0, calls_per_minute: int = 60
    ):
        """
        Initializes the rate limiter.

        Args:
            calls_per_second: The maximum (and starting) rate of calls per second.
            calls_per_minute: How many calls may start in any 60 second window.
        """
        self._rate = calls_per_second
        self._max_rate = calls_per_second
        self._min_interval = 1.0 / self._rate
        self._per_minute = calls_per_minute
        self._window: deque[float] = deque()
        self._last_call_time = 0.0
        self._last_429_time = 0.0
        self._lock = asyncio.Lock()

    @property
    def rate(self) -> float:
        return self._rate

    async def on_429(self) -> None:
        """
        Called when a 429 error is received. Halves the current request rate.
        """
        async with self._lock:
            self._rate = max(0.5, self._rate * 0.5)
            self._min_interval = 1.0 / self._rate
            self._last_429_time = time.monotonic()
            log.warning(
                f"[yellow]Rate limit hit. New rate: {self._rate:.1f} calls/s[/yellow]"
            )

    async def acquire(self) -> None:
        """
        Waits if necessary to respect the current rate limit before allowing a call to proceed.
        """
        async with self._lock:
            now = time.monotonic()

            # Recover towards the full rate once 429s have stopped for a minute
            if self._rate < self._max_rate and now - self._last_429_time > 60:
                self._rate = min(self._max_rate, self._rate * 2)
                self._min_interval = 1.0 / self._rate

            while self._window and now - self._window[0] >= 60:
                self._window.popleft()
            if len(self._window) >= self._per_minute:
                wait = 60 - (now - self._window[0])
                log.debug(f"Per-minute quota reached, waiting {wait:.1f}s.")
                await asyncio.sleep(wait)
                now = time.monotonic()
                self._window.popleft()

            time_since_last = now - self._last_call_time
            if time_since_last < self._min_interval:
                await asyncio.sleep(self._min_interval - time_since_last)

            self._last_call_time = time.monotonic()
            self._window.append(self._last_call_time)
