# SPDX-License-Identifier: Apache-2.0
"""Concurrency and resilience layer shared by all backends."""

from .credential_pool import CredentialPool, PooledCredential
from .rate_governor import RateGovernor
from .retry import RetryExecutor
from .token_cache import TokenCache
from .transport import HttpResponse, HttpTransport

__all__ = [
    "CredentialPool",
    "HttpResponse",
    "HttpTransport",
    "PooledCredential",
    "RateGovernor",
    "RetryExecutor",
    "TokenCache",
]
