# SPDX-License-Identifier: Apache-2.0
"""Per-call translation options."""

from __future__ import annotations

from dataclasses import dataclass, replace

from async_translate.errors import ConfigurationError

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 3


@dataclass(frozen=True)
class TranslateOptions:
    """Options for one logical translate call.

    Attributes:
        timeout: Per-attempt timeout in seconds. None disables the timeout.
        max_retries: Retries after the initial attempt (0 = single attempt).
    """

    timeout: float | None = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES

    def __post_init__(self) -> None:
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        if self.max_retries < 0:
            raise ConfigurationError(
                f"max_retries must not be negative, got {self.max_retries}"
            )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def with_timeout(self, timeout: float) -> TranslateOptions:
        return replace(self, timeout=timeout)

    def without_timeout(self) -> TranslateOptions:
        return replace(self, timeout=None)

    def with_max_retries(self, max_retries: int) -> TranslateOptions:
        return replace(self, max_retries=max_retries)

    def without_retries(self) -> TranslateOptions:
        return replace(self, max_retries=0)
