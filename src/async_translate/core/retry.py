# SPDX-License-Identifier: Apache-2.0
"""Retry engine with exponential backoff and per-attempt error history."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from async_translate.errors import (
    MaxRetriesExceeded,
    TranslationTimeoutError,
    TranslatorError,
)
from async_translate.options import TranslateOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BASE_DELAY = 0.1


class RetryExecutor:
    """Runs an operation until it succeeds, fails fatally, or runs out of budget.

    Retryable failures are collected; a non-retryable failure propagates as
    soon as it is seen. The k-th retry waits ``base_delay * 2 ** (k - 1)``.
    """

    def __init__(
        self,
        base_delay: float = DEFAULT_BASE_DELAY,
        *,
        sleeper: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._base_delay = base_delay
        self._sleeper = sleeper

    def backoff_delay(self, retry: int) -> float:
        """Delay before the given retry (1-based)."""
        return self._base_delay * (2 ** (retry - 1))

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        options: TranslateOptions,
    ) -> T:
        """Run ``operation`` with up to ``options.max_retries`` retries.

        Args:
            operation: Zero-argument coroutine function performing one attempt.
            options: Timeout (applied to every attempt) and retry budget.

        Returns:
            The result of the first successful attempt.

        Raises:
            TranslatorError: The first non-retryable failure, unchanged.
            MaxRetriesExceeded: If every attempt failed with a retryable error.
        """
        errors: list[TranslatorError] = []
        attempts = options.max_attempts

        for attempt in range(attempts):
            if attempt > 0:
                delay = self.backoff_delay(attempt)
                logger.debug(
                    "Retrying in %.2f s (attempt %d/%d) after: %s",
                    delay,
                    attempt + 1,
                    attempts,
                    errors[-1],
                )
                await self._sleeper(delay)

            try:
                return await self._run_attempt(operation, options.timeout)
            except TranslatorError as exc:
                if not exc.is_retryable():
                    raise
                errors.append(exc)

        logger.warning("Giving up after %d attempts: %s", attempts, errors[-1])
        raise MaxRetriesExceeded(attempts, errors)

    @staticmethod
    async def _run_attempt(
        operation: Callable[[], Awaitable[T]],
        timeout: float | None,
    ) -> T:
        if timeout is None:
            return await operation()
        try:
            return await asyncio.wait_for(operation(), timeout)
        except asyncio.TimeoutError as e:
            raise TranslationTimeoutError(
                f"Attempt timed out after {timeout:g} s"
            ) from e
