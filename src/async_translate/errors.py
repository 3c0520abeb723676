# SPDX-License-Identifier: Apache-2.0
"""Error taxonomy shared by every translation backend.

Each error knows whether it is worth another attempt. Classification happens
once, where the failure is first observed; the retry layer only asks
``is_retryable()`` and never re-classifies.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import ClassVar


class TranslatorError(Exception):
    """Base exception for translator module."""

    retryable: ClassVar[bool] = False

    def is_retryable(self) -> bool:
        """Return True if another attempt may succeed."""
        return self.retryable


class NetworkError(TranslatorError):
    """Transport-level failure (connect, DNS, connection reset).

    This error type is retryable.
    """

    retryable = True


class TranslationTimeoutError(TranslatorError):
    """Request or attempt exceeded its timeout.

    This error type is retryable.
    """

    retryable = True

    def __init__(self, message: str = "Request timeout") -> None:
        super().__init__(message)


class HttpError(TranslatorError):
    """Non-success HTTP response.

    Retryable for server errors (5xx) only.
    """

    def __init__(self, status: int, body: str = "", service: str = "HTTP") -> None:
        message = f"{service} error {status}"
        if body:
            message = f"{message}: {body}"
        super().__init__(message)
        self.status = status
        self.body = body

    def is_retryable(self) -> bool:
        return self.status >= 500


class AuthenticationError(TranslatorError):
    """Credential rejected or authentication endpoint unusable.

    This error type is NOT retryable.
    """


class ServiceError(TranslatorError):
    """Backend answered but returned no usable translation.

    This error type is NOT retryable.
    """


class ArrayLengthMismatchError(ServiceError):
    """Backend returned a different number of translations than requested."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Expected {expected} translations but got {actual}")
        self.expected = expected
        self.actual = actual


class ConfigurationError(TranslatorError):
    """Configuration error (missing API key, invalid parameters, etc.).

    This error type is NOT retryable - fix the configuration first.
    """


class TranslatorNotFoundError(ConfigurationError):
    """No translator is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Translator '{name}' not found")
        self.name = name


class MaxRetriesExceeded(TranslatorError):
    """All attempts failed with retryable errors.

    Attributes:
        attempts: Number of attempts made.
        errors: The error of every attempt, in order.
    """

    def __init__(self, attempts: int, errors: Sequence[TranslatorError]) -> None:
        self.attempts = attempts
        self.errors = list(errors)
        lines = [f"Max retries exceeded after {attempts} attempts"]
        for i, error in enumerate(self.errors, 1):
            lines.append(f"  Attempt {i}: {error}")
        super().__init__("\n".join(lines))

    @property
    def last_error(self) -> TranslatorError | None:
        """Error of the final attempt, if any."""
        return self.errors[-1] if self.errors else None
