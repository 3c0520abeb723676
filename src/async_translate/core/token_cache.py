# SPDX-License-Identifier: Apache-2.0
"""Cached short-lived bearer token with proactive refresh."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from async_translate.errors import (
    AuthenticationError,
    NetworkError,
    TranslationTimeoutError,
    TranslatorError,
)

logger = logging.getLogger(__name__)

# Issued tokens live about 10 minutes; refresh well before that.
DEFAULT_TOKEN_LIFETIME = 9 * 60.0
DEFAULT_REFRESH_MARGIN = 60.0
DEFAULT_AUTH_ATTEMPTS = 3
DEFAULT_AUTH_RETRY_DELAY = 1.0


class TokenCache:
    """Hands out a valid token, fetching a new one only when needed.

    The lock guarding the cached value also serializes refreshes, so callers
    that all find the cache stale trigger a single authentication call.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[str]],
        *,
        static_token: str | None = None,
        lifetime: float = DEFAULT_TOKEN_LIFETIME,
        refresh_margin: float = DEFAULT_REFRESH_MARGIN,
        auth_attempts: int = DEFAULT_AUTH_ATTEMPTS,
        auth_retry_delay: float = DEFAULT_AUTH_RETRY_DELAY,
        clock: Callable[[], float] = time.monotonic,
        sleeper: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize TokenCache.

        Args:
            fetch: Coroutine function performing one authentication call.
            static_token: Fixed credential; when set, ``fetch`` is never used.
            lifetime: Seconds a fetched token is kept.
            refresh_margin: Tokens with less remaining lifetime are refreshed.
            auth_attempts: Authentication attempts per refresh.
            auth_retry_delay: Fixed delay between authentication attempts.
            clock: Monotonic time source.
            sleeper: Coroutine used for the delay between attempts.
        """
        self._fetch = fetch
        self._static_token = static_token or None
        self._lifetime = lifetime
        self._refresh_margin = refresh_margin
        self._auth_attempts = max(1, auth_attempts)
        self._auth_retry_delay = auth_retry_delay
        self._clock = clock
        self._sleeper = sleeper

        self._token: str | None = None
        self._expires_at: float | None = None
        self._lock = asyncio.Lock()

    @property
    def is_static(self) -> bool:
        return self._static_token is not None

    async def get_token(self) -> str:
        """Return a token with more than ``refresh_margin`` seconds left.

        Raises:
            AuthenticationError: If every authentication attempt failed.
            NetworkError: If the final attempt failed at the transport level.
            TranslationTimeoutError: If the final attempt timed out.
        """
        if self._static_token is not None:
            return self._static_token

        async with self._lock:
            if self._token is not None and self._is_fresh():
                return self._token

            token = await self._authenticate()
            self._token = token
            self._expires_at = self._clock() + self._lifetime
            logger.debug("Authentication token refreshed, valid for %.0f s", self._lifetime)
            return token

    def invalidate(self) -> None:
        """Drop the cached token so the next ``get_token()`` re-authenticates."""
        if self._token is not None:
            logger.debug("Cached authentication token invalidated")
        self._token = None
        self._expires_at = None

    def _is_fresh(self) -> bool:
        if self._expires_at is None:
            return False
        return self._expires_at - self._clock() > self._refresh_margin

    async def _authenticate(self) -> str:
        last_error: TranslatorError | None = None
        for attempt in range(1, self._auth_attempts + 1):
            try:
                return await self._fetch()
            except TranslatorError as exc:
                last_error = exc
                logger.warning(
                    "Authentication attempt %d/%d failed: %s",
                    attempt,
                    self._auth_attempts,
                    exc,
                )
            if attempt < self._auth_attempts:
                await self._sleeper(self._auth_retry_delay)

        if isinstance(last_error, (NetworkError, TranslationTimeoutError)):
            raise last_error
        raise AuthenticationError(
            f"Failed to authenticate after {self._auth_attempts} attempts: {last_error}"
        ) from last_error
