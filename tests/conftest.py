# SPDX-License-Identifier: Apache-2.0
"""Shared fixtures for async_translate tests."""

from __future__ import annotations

import json
from typing import Any

import pytest

from async_translate.core.transport import HttpResponse


class FakeClock:
    """Manually advanced monotonic clock whose sleep only moves time forward."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def json_response(payload: Any, status: int = 200) -> HttpResponse:
    """Build an HttpResponse carrying a JSON body."""
    return HttpResponse(status=status, body=json.dumps(payload))


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
