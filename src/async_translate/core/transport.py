# SPDX-License-Identifier: Apache-2.0
"""HTTP transport collaborator backed by aiohttp."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from async_translate.errors import (
    AuthenticationError,
    HttpError,
    NetworkError,
    ServiceError,
    TranslationTimeoutError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpResponse:
    """Status, headers and decoded body of one HTTP exchange."""

    status: int
    body: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def raise_for_status(self, service: str = "HTTP") -> None:
        """Map a non-success status into the error taxonomy.

        Args:
            service: Service name used in error messages.

        Raises:
            AuthenticationError: On 401.
            HttpError: On any other non-2xx status.
        """
        if self.ok:
            return
        if self.status == 401:
            message = f"{service} rejected the credential (HTTP 401)"
            if self.body:
                message = f"{message}: {self.body}"
            raise AuthenticationError(message)
        raise HttpError(self.status, self.body, service=service)


class HttpTransport:
    """Issues HTTP requests through a lazily created aiohttp session.

    A session passed in by the caller is used as-is and never closed here.
    """

    def __init__(self, session: aiohttp.ClientSession | None = None) -> None:
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> HttpTransport:
        await self._ensure_session()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure aiohttp session exists.

        Returns:
            Active aiohttp session.
        """
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        json: Any = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        """Send one request and read the whole body.

        Args:
            method: HTTP method.
            url: Absolute URL.
            headers: Request headers.
            params: Query parameters.
            json: JSON-serializable body.
            timeout: Total timeout in seconds, None for no timeout.

        Returns:
            The response; non-2xx statuses are returned, not raised.

        Raises:
            TranslationTimeoutError: If the request timed out.
            NetworkError: On any other transport failure.
        """
        session = await self._ensure_session()
        try:
            async with session.request(
                method,
                url,
                headers=dict(headers) if headers else None,
                params=dict(params) if params else None,
                json=json,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                body = self._decode(await response.read(), response.charset, url)
                return HttpResponse(
                    status=response.status,
                    body=body,
                    headers=dict(response.headers),
                )
        except asyncio.TimeoutError as e:
            # aiohttp's timeout errors are also ClientErrors; check first
            logger.debug("%s %s timed out after %s s", method, url, timeout)
            raise TranslationTimeoutError(f"{method} {url} timed out") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"{method} {url} failed: {e}") from e

    @staticmethod
    def _decode(raw: bytes, charset: str | None, url: str) -> str:
        """Decode a response body with its declared charset (default UTF-8).

        Raises:
            ServiceError: If the body does not decode.
        """
        encoding = charset or "utf-8"
        try:
            return raw.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise ServiceError(
                f"Response from {url} is not valid {encoding}: {e}"
            ) from e

    async def close(self) -> None:
        """Close the HTTP session if this transport created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None
