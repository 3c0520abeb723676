# SPDX-License-Identifier: Apache-2.0
"""Tests for TokenCache."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest
from conftest import FakeClock

from async_translate.core.token_cache import TokenCache
from async_translate.errors import (
    AuthenticationError,
    HttpError,
    NetworkError,
    TranslationTimeoutError,
)


def _make_cache(fetch: AsyncMock, clock: FakeClock, **kwargs) -> TokenCache:
    return TokenCache(fetch, clock=clock, sleeper=clock.sleep, **kwargs)


class TestStaticToken:
    """A configured key bypasses authentication."""

    async def test_returns_static_token(self, fake_clock: FakeClock) -> None:
        fetch = AsyncMock(return_value="fetched")
        cache = _make_cache(fetch, fake_clock, static_token="sub-key")

        assert cache.is_static
        assert await cache.get_token() == "sub-key"
        fetch.assert_not_awaited()

    async def test_invalidate_keeps_static_token(self, fake_clock: FakeClock) -> None:
        fetch = AsyncMock(return_value="fetched")
        cache = _make_cache(fetch, fake_clock, static_token="sub-key")

        cache.invalidate()

        assert await cache.get_token() == "sub-key"
        fetch.assert_not_awaited()


class TestCaching:
    """Tests for reuse and refresh."""

    async def test_reuses_fresh_token(self, fake_clock: FakeClock) -> None:
        fetch = AsyncMock(side_effect=["T1", "T2"])
        cache = _make_cache(fetch, fake_clock)

        assert await cache.get_token() == "T1"
        fake_clock.advance(100)
        assert await cache.get_token() == "T1"
        assert fetch.await_count == 1

    async def test_refreshes_inside_margin(self, fake_clock: FakeClock) -> None:
        """A 540 s token with a 60 s margin is replaced from 480 s on."""
        fetch = AsyncMock(side_effect=["T1", "T2"])
        cache = _make_cache(fetch, fake_clock)

        await cache.get_token()
        fake_clock.advance(479)
        assert await cache.get_token() == "T1"

        fake_clock.advance(1)
        assert await cache.get_token() == "T2"
        assert fetch.await_count == 2

    async def test_custom_lifetime(self, fake_clock: FakeClock) -> None:
        fetch = AsyncMock(side_effect=["T1", "T2"])
        cache = _make_cache(fetch, fake_clock, lifetime=120, refresh_margin=20)

        await cache.get_token()
        fake_clock.advance(100)

        assert await cache.get_token() == "T2"

    async def test_invalidate_forces_refresh(self, fake_clock: FakeClock) -> None:
        fetch = AsyncMock(side_effect=["T1", "T2"])
        cache = _make_cache(fetch, fake_clock)

        await cache.get_token()
        cache.invalidate()

        assert await cache.get_token() == "T2"

    async def test_concurrent_callers_share_one_refresh(self, fake_clock: FakeClock) -> None:
        calls = 0

        async def fetch() -> str:
            nonlocal calls
            calls += 1
            await asyncio.sleep(0)
            return f"T{calls}"

        cache = _make_cache(fetch, fake_clock)

        tokens = await asyncio.gather(*(cache.get_token() for _ in range(10)))

        assert calls == 1
        assert set(tokens) == {"T1"}


class TestAuthentication:
    """Tests for authentication retries."""

    async def test_retries_with_fixed_delay(self, fake_clock: FakeClock) -> None:
        fetch = AsyncMock(
            side_effect=[HttpError(503, "busy"), NetworkError("reset"), "T1"]
        )
        cache = _make_cache(fetch, fake_clock)

        assert await cache.get_token() == "T1"
        assert fetch.await_count == 3
        assert fake_clock.sleeps == [1.0, 1.0]

    async def test_gives_up_after_three_attempts(self, fake_clock: FakeClock) -> None:
        fetch = AsyncMock(side_effect=AuthenticationError("HTTP 403"))
        cache = _make_cache(fetch, fake_clock)

        with pytest.raises(AuthenticationError, match="after 3 attempts"):
            await cache.get_token()

        assert fetch.await_count == 3
        assert fake_clock.sleeps == [1.0, 1.0]

    async def test_final_http_failure_becomes_authentication_error(
        self, fake_clock: FakeClock
    ) -> None:
        fetch = AsyncMock(side_effect=HttpError(500, "down"))
        cache = _make_cache(fetch, fake_clock)

        with pytest.raises(AuthenticationError) as exc_info:
            await cache.get_token()

        assert isinstance(exc_info.value.__cause__, HttpError)

    async def test_final_network_error_is_reraised(self, fake_clock: FakeClock) -> None:
        fetch = AsyncMock(side_effect=NetworkError("unreachable"))
        cache = _make_cache(fetch, fake_clock)

        with pytest.raises(NetworkError):
            await cache.get_token()

    async def test_final_timeout_is_reraised(self, fake_clock: FakeClock) -> None:
        fetch = AsyncMock(
            side_effect=[AuthenticationError("no"), AuthenticationError("no"), TranslationTimeoutError()]
        )
        cache = _make_cache(fetch, fake_clock)

        with pytest.raises(TranslationTimeoutError):
            await cache.get_token()

    async def test_failure_leaves_cache_empty(self, fake_clock: FakeClock) -> None:
        fetch = AsyncMock(
            side_effect=[AuthenticationError("x")] * 3 + ["T1"]
        )
        cache = _make_cache(fetch, fake_clock)

        with pytest.raises(AuthenticationError):
            await cache.get_token()

        assert await cache.get_token() == "T1"
