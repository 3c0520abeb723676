# SPDX-License-Identifier: Apache-2.0
"""Per-credential admission control: concurrency bound plus RPM window."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from async_translate.errors import ConfigurationError

logger = logging.getLogger(__name__)

RPM_WINDOW_SECONDS = 60.0


class RateGovernor:
    """Bounds in-flight requests and, optionally, requests per minute.

    ``admit()`` suspends the caller until fewer than ``concurrency_limit``
    admissions are outstanding and, when ``rpm_limit`` is positive, fewer than
    ``rpm_limit`` admissions were granted in the trailing window. The window
    slides: it is recomputed relative to "now" on every check.

    Attributes:
        concurrency_limit: Maximum simultaneous admissions.
        rpm_limit: Maximum admissions per window (0 = unlimited).
    """

    def __init__(
        self,
        concurrency_limit: int,
        rpm_limit: int = 0,
        *,
        window: float = RPM_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleeper: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize RateGovernor.

        Args:
            concurrency_limit: Maximum simultaneous admissions (>= 1).
            rpm_limit: Requests per window, 0 disables the rate check.
            window: Sliding window length in seconds.
            clock: Monotonic time source.
            sleeper: Coroutine used to wait for the window to free up.

        Raises:
            ConfigurationError: On invalid limits.
        """
        if concurrency_limit < 1:
            raise ConfigurationError(
                f"concurrency_limit must be at least 1, got {concurrency_limit}"
            )
        if rpm_limit < 0:
            raise ConfigurationError(f"rpm_limit must not be negative, got {rpm_limit}")

        self._concurrency_limit = concurrency_limit
        self._rpm_limit = rpm_limit
        self._window = window
        self._clock = clock
        self._sleeper = sleeper
        self._semaphore = asyncio.Semaphore(concurrency_limit)
        self._outstanding = 0
        self._timestamps: deque[float] = deque()
        self._lock = asyncio.Lock()

    @property
    def concurrency_limit(self) -> int:
        return self._concurrency_limit

    @property
    def rpm_limit(self) -> int:
        return self._rpm_limit

    @property
    def outstanding(self) -> int:
        """Number of admissions currently held."""
        return self._outstanding

    @asynccontextmanager
    async def admit(self) -> AsyncIterator[None]:
        """Hold one admission for the duration of the ``async with`` block."""
        async with self._semaphore:
            self._outstanding += 1
            try:
                await self._wait_for_rate_window()
                yield
            finally:
                self._outstanding -= 1

    async def _wait_for_rate_window(self) -> None:
        if self._rpm_limit == 0:
            return

        while True:
            async with self._lock:
                now = self._clock()
                self._evict_expired(now)
                if len(self._timestamps) < self._rpm_limit:
                    self._timestamps.append(now)
                    return
                wait = self._window - (now - self._timestamps[0])

            logger.debug(
                "RPM limit %d reached, waiting %.2f s for the window to slide",
                self._rpm_limit,
                wait,
            )
            await self._sleeper(wait)

    def _evict_expired(self, now: float) -> None:
        while self._timestamps and now - self._timestamps[0] >= self._window:
            self._timestamps.popleft()
