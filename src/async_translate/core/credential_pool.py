# SPDX-License-Identifier: Apache-2.0
"""Round-robin pool of API keys, each with its own rate governor."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from typing import NamedTuple

from async_translate.core.rate_governor import RateGovernor
from async_translate.errors import ConfigurationError


class PooledCredential(NamedTuple):
    """A credential and the governor that paces its requests."""

    credential: str
    governor: RateGovernor


class CredentialPool:
    """Fixed, ordered set of credentials selected round-robin."""

    def __init__(
        self,
        credentials: Sequence[str],
        *,
        concurrency_limit: int,
        rpm_limit: int = 0,
        governor_factory: Callable[[], RateGovernor] | None = None,
    ) -> None:
        """Initialize CredentialPool.

        Args:
            credentials: API keys in rotation order.
            concurrency_limit: Concurrency bound applied to each key.
            rpm_limit: RPM bound applied to each key (0 = unlimited).
            governor_factory: Builds one governor per key; overrides the limits.

        Raises:
            ConfigurationError: If the pool is empty or a key is blank.
        """
        if not credentials:
            raise ConfigurationError("No API keys configured")
        if any(not key or not key.strip() for key in credentials):
            raise ConfigurationError("API keys must not be empty")

        if governor_factory is None:

            def governor_factory() -> RateGovernor:
                return RateGovernor(concurrency_limit, rpm_limit)

        self._entries = tuple(
            PooledCredential(key, governor_factory()) for key in credentials
        )
        self._cursor = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def next(self) -> PooledCredential:
        """Return the entry at the cursor and advance the cursor by one."""
        with self._lock:
            index = self._cursor
            self._cursor = (index + 1) % len(self._entries)
        return self._entries[index]
