# SPDX-License-Identifier: Apache-2.0
"""Tests for RetryExecutor."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest
from conftest import FakeClock

from async_translate.core.retry import RetryExecutor
from async_translate.errors import (
    AuthenticationError,
    HttpError,
    MaxRetriesExceeded,
    NetworkError,
    TranslationTimeoutError,
)
from async_translate.options import TranslateOptions


@pytest.fixture
def executor(fake_clock: FakeClock) -> RetryExecutor:
    return RetryExecutor(sleeper=fake_clock.sleep)


class TestBackoff:
    """Tests for the delay schedule."""

    def test_default_schedule(self) -> None:
        executor = RetryExecutor()
        delays = [executor.backoff_delay(k) for k in range(1, 5)]
        assert delays == pytest.approx([0.1, 0.2, 0.4, 0.8])

    def test_custom_base_delay(self) -> None:
        assert RetryExecutor(base_delay=0.5).backoff_delay(3) == pytest.approx(2.0)


class TestExecute:
    """Tests for retry behavior."""

    async def test_first_attempt_success(
        self, executor: RetryExecutor, fake_clock: FakeClock
    ) -> None:
        operation = AsyncMock(return_value="ok")

        assert await executor.execute(operation, TranslateOptions()) == "ok"
        assert operation.await_count == 1
        assert fake_clock.sleeps == []

    async def test_recovers_after_server_errors(
        self, executor: RetryExecutor, fake_clock: FakeClock
    ) -> None:
        operation = AsyncMock(side_effect=[HttpError(503), HttpError(503), "Hola"])

        result = await executor.execute(operation, TranslateOptions(max_retries=3))

        assert result == "Hola"
        assert operation.await_count == 3
        assert fake_clock.sleeps == pytest.approx([0.1, 0.2])

    async def test_fatal_error_is_not_retried(
        self, executor: RetryExecutor, fake_clock: FakeClock
    ) -> None:
        operation = AsyncMock(side_effect=AuthenticationError("invalid key"))

        with pytest.raises(AuthenticationError):
            await executor.execute(operation, TranslateOptions(max_retries=5))

        assert operation.await_count == 1
        assert fake_clock.sleeps == []

    async def test_client_error_stops_midway(
        self, executor: RetryExecutor, fake_clock: FakeClock
    ) -> None:
        operation = AsyncMock(side_effect=[NetworkError("reset"), HttpError(400, "bad")])

        with pytest.raises(HttpError) as exc_info:
            await executor.execute(operation, TranslateOptions())

        assert exc_info.value.status == 400
        assert operation.await_count == 2

    async def test_exhausted_budget_reports_every_attempt(
        self, executor: RetryExecutor, fake_clock: FakeClock
    ) -> None:
        errors = [
            NetworkError("reset"),
            HttpError(502),
            TranslationTimeoutError(),
            HttpError(503),
        ]
        operation = AsyncMock(side_effect=errors)

        with pytest.raises(MaxRetriesExceeded) as exc_info:
            await executor.execute(operation, TranslateOptions(max_retries=3))

        assert exc_info.value.attempts == 4
        assert exc_info.value.errors == errors
        assert fake_clock.sleeps == pytest.approx([0.1, 0.2, 0.4])

    async def test_zero_retries_means_one_attempt(
        self, executor: RetryExecutor, fake_clock: FakeClock
    ) -> None:
        operation = AsyncMock(side_effect=HttpError(500))

        with pytest.raises(MaxRetriesExceeded) as exc_info:
            await executor.execute(operation, TranslateOptions().without_retries())

        assert exc_info.value.attempts == 1
        assert len(exc_info.value.errors) == 1
        assert fake_clock.sleeps == []

    async def test_non_translator_errors_propagate(self, executor: RetryExecutor) -> None:
        operation = AsyncMock(side_effect=ValueError("bug"))

        with pytest.raises(ValueError):
            await executor.execute(operation, TranslateOptions())

        assert operation.await_count == 1


class TestTimeout:
    """Tests for the per-attempt timeout."""

    async def test_slow_attempt_times_out_and_is_retried(self) -> None:
        sleeper = AsyncMock()
        executor = RetryExecutor(sleeper=sleeper)
        calls = 0

        async def operation() -> str:
            nonlocal calls
            calls += 1
            if calls == 1:
                await asyncio.sleep(10)
            return "done"

        result = await executor.execute(
            operation, TranslateOptions(timeout=0.01, max_retries=1)
        )

        assert result == "done"
        assert calls == 2
        sleeper.assert_awaited_once()

    async def test_every_attempt_times_out(self) -> None:
        executor = RetryExecutor(sleeper=AsyncMock())

        async def operation() -> str:
            await asyncio.sleep(10)
            return "never"

        with pytest.raises(MaxRetriesExceeded) as exc_info:
            await executor.execute(operation, TranslateOptions(timeout=0.01, max_retries=1))

        assert all(isinstance(e, TranslationTimeoutError) for e in exc_info.value.errors)
        assert len(exc_info.value.errors) == 2

    async def test_no_timeout(self, executor: RetryExecutor) -> None:
        operation = AsyncMock(return_value="ok")

        assert await executor.execute(operation, TranslateOptions().without_timeout()) == "ok"
