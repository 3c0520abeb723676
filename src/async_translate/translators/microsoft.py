# SPDX-License-Identifier: Apache-2.0
"""Microsoft Translator (v3) translation backend."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from async_translate.core.rate_governor import RateGovernor
from async_translate.core.retry import RetryExecutor
from async_translate.core.token_cache import (
    DEFAULT_REFRESH_MARGIN,
    DEFAULT_TOKEN_LIFETIME,
    TokenCache,
)
from async_translate.core.transport import HttpTransport
from async_translate.errors import (
    ArrayLengthMismatchError,
    AuthenticationError,
    ServiceError,
)
from async_translate.options import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT, TranslateOptions
from async_translate.translators.base import LanguageTagMixin, is_blank, require_language

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://api-edge.cognitive.microsofttranslator.com"
DEFAULT_AUTH_URL = "https://edge.microsoft.com/translate/auth"
API_VERSION = "3.0"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class DetectedLanguage(BaseModel):
    language: str
    score: float


class Translation(BaseModel):
    text: str
    to: str | None = None


class TranslationItem(BaseModel):
    """One element of a /translate response, matching one input text."""

    model_config = ConfigDict(populate_by_name=True)

    detected_language: DetectedLanguage | None = Field(
        default=None, alias="detectedLanguage"
    )
    translations: list[Translation] = Field(default_factory=list)


_RESPONSE_ADAPTER = TypeAdapter(list[TranslationItem])


@dataclass
class MicrosoftConfig:
    """Configuration for MicrosoftTranslator.

    Attributes:
        endpoint: Service endpoint. None uses the public edge endpoint.
        api_key: Subscription key. None fetches a temporary edge token instead.
        region: Subscription region, sent only together with ``api_key``.
        concurrent_limit: Simultaneous requests.
        rpm_limit: Requests per minute, 0 disables the limit.
        auth_url: Edge token endpoint used when no ``api_key`` is set.
        token_lifetime: Seconds a fetched edge token is reused.
        token_refresh_margin: Tokens closer than this to expiry are refreshed.
        timeout: Default per-attempt timeout in seconds (None = no timeout).
        max_retries: Default retry count.
    """

    endpoint: str | None = None
    api_key: str | None = None
    region: str | None = None
    concurrent_limit: int = 10
    rpm_limit: int = 0
    auth_url: str = DEFAULT_AUTH_URL
    token_lifetime: float = DEFAULT_TOKEN_LIFETIME
    token_refresh_margin: float = DEFAULT_REFRESH_MARGIN
    timeout: float | None = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES

    API_KEY_ENV_VAR: ClassVar[str] = "MICROSOFT_TRANSLATOR_KEY"
    REGION_ENV_VAR: ClassVar[str] = "MICROSOFT_TRANSLATOR_REGION"
    ENDPOINT_ENV_VAR: ClassVar[str] = "MICROSOFT_TRANSLATOR_ENDPOINT"

    @property
    def effective_endpoint(self) -> str:
        """Get effective endpoint (resolves None to the edge endpoint)."""
        return (self.endpoint or DEFAULT_ENDPOINT).rstrip("/")

    @classmethod
    def from_env(cls, **overrides: Any) -> MicrosoftConfig:
        """Build a config from environment variables.

        Priority: keyword argument > environment variable > default.
        """
        values: dict[str, Any] = {
            "api_key": os.environ.get(cls.API_KEY_ENV_VAR) or None,
            "region": os.environ.get(cls.REGION_ENV_VAR) or None,
            "endpoint": os.environ.get(cls.ENDPOINT_ENV_VAR) or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def default_options(self) -> TranslateOptions:
        return TranslateOptions(timeout=self.timeout, max_retries=self.max_retries)


class MicrosoftTranslator(LanguageTagMixin):
    """Microsoft Translator backend.

    Without an API key the translator authenticates with a temporary edge
    token that is cached, refreshed before it expires, and dropped when the
    service answers 401.

    Batches are all-or-nothing: texts are sent in as few requests as the
    service limits allow, and any request failing for good fails the batch.

    Attributes:
        name: Backend identifier ("microsoft").
    """

    MAX_TEXTS_PER_REQUEST = 1000
    MAX_CHARS_PER_REQUEST = 50000

    def __init__(
        self,
        config: MicrosoftConfig | None = None,
        *,
        transport: HttpTransport | None = None,
        retry: RetryExecutor | None = None,
        token_cache: TokenCache | None = None,
    ) -> None:
        """Initialize MicrosoftTranslator.

        Args:
            config: Translator configuration.
            transport: HTTP transport (default: a private aiohttp transport).
            retry: Retry engine (default: 100 ms exponential backoff).
            token_cache: Credential cache (default: built from ``config``).

        Raises:
            ConfigurationError: If limits are invalid.
        """
        self._config = config or MicrosoftConfig()
        self._governor = RateGovernor(
            self._config.concurrent_limit, self._config.rpm_limit
        )
        self._default_options = self._config.default_options()
        self._owns_transport = transport is None
        self._transport = transport or HttpTransport()
        self._retry = retry or RetryExecutor()
        self._token_cache = token_cache or TokenCache(
            self._fetch_edge_token,
            static_token=self._config.api_key,
            lifetime=self._config.token_lifetime,
            refresh_margin=self._config.token_refresh_margin,
        )

    @property
    def name(self) -> str:
        """Return backend name."""
        return "microsoft"

    @property
    def config(self) -> MicrosoftConfig:
        return self._config

    async def __aenter__(self) -> MicrosoftTranslator:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def get_auth_token(self) -> str:
        """Return the credential used for the next request."""
        return await self._token_cache.get_token()

    def clear_cached_token(self) -> None:
        """Force the next request to re-authenticate."""
        self._token_cache.invalidate()

    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        options: TranslateOptions | None = None,
    ) -> str:
        """Translate a single text.

        Args:
            text: Text to translate.
            target_lang: Target language code ("zh-Hans", "ja").
            source_lang: Source language code, None for auto-detection.
            options: Timeout and retry budget; None uses the config defaults.

        Returns:
            Translated text.

        Raises:
            ConfigurationError: On a missing target language.
            AuthenticationError: If authentication failed or was rejected.
            ServiceError: If the response carries no translation.
            MaxRetriesExceeded: If every attempt failed transiently.
        """
        target_lang = require_language(target_lang)
        # Early return for empty or whitespace-only text
        if is_blank(text):
            return text

        items = await self._translate_chunk([text], target_lang, source_lang, options)
        return self._first_text(items[0])

    async def translate_batch(
        self,
        texts: Sequence[str],
        target_lang: str,
        source_lang: str | None = None,
        options: TranslateOptions | None = None,
    ) -> list[str]:
        """Translate multiple texts.

        Empty and whitespace-only texts are kept as-is and not sent.

        Returns:
            List of translated texts (same order and length as input).

        Raises:
            TranslatorError: If any request fails terminally.
        """
        if not texts:
            return []
        target_lang = require_language(target_lang)

        # Track empty/whitespace indices for restoration
        results: list[str] = list(texts)
        non_empty_indices = [i for i, text in enumerate(texts) if not is_blank(text)]
        if not non_empty_indices:
            return results

        items = await self.translate_batch_detailed(
            [texts[i] for i in non_empty_indices], target_lang, source_lang, options
        )
        for i, item in zip(non_empty_indices, items):
            results[i] = self._first_text(item)
        return results

    async def translate_batch_detailed(
        self,
        texts: Sequence[str],
        target_lang: str,
        source_lang: str | None = None,
        options: TranslateOptions | None = None,
    ) -> list[TranslationItem]:
        """Translate multiple texts, keeping detected language information.

        Args:
            texts: Texts to translate; sent unchanged.
            target_lang: Target language code.
            source_lang: Source language code, None for auto-detection.
            options: Applied to every request.

        Returns:
            One TranslationItem per input text, in input order.

        Raises:
            TranslatorError: If any request fails terminally.
        """
        if not texts:
            return []
        target_lang = require_language(target_lang)

        chunks = self._chunk_texts(list(texts))
        logger.debug("Translating %d texts in %d request(s)", len(texts), len(chunks))

        items: list[TranslationItem] = []
        for chunk in chunks:
            items.extend(
                await self._translate_chunk(chunk, target_lang, source_lang, options)
            )
        return items

    def _chunk_texts(self, texts: list[str]) -> list[list[str]]:
        """Group texts into /translate requests.

        One request carries at most ``MAX_TEXTS_PER_REQUEST`` array elements
        and ``MAX_CHARS_PER_REQUEST`` characters of text in total. A single
        text over the character limit still gets a request of its own; the
        service rejects it there.
        """
        requests: list[list[str]] = [[]]
        chars = 0
        for text in texts:
            pending = requests[-1]
            full = len(pending) == self.MAX_TEXTS_PER_REQUEST
            if pending and (full or chars + len(text) > self.MAX_CHARS_PER_REQUEST):
                pending = []
                requests.append(pending)
                chars = 0
            pending.append(text)
            chars += len(text)
        return [request for request in requests if request]

    async def _translate_chunk(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None,
        options: TranslateOptions | None,
    ) -> list[TranslationItem]:
        options = options or self._default_options
        return await self._retry.execute(
            lambda: self._attempt(texts, target_lang, source_lang, options.timeout),
            options,
        )

    async def _attempt(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None,
        timeout: float | None,
    ) -> list[TranslationItem]:
        async with self._governor.admit():
            headers = await self._auth_headers()
            params = {
                "api-version": API_VERSION,
                "to": target_lang,
                "includeSentenceLength": "true",
            }
            if source_lang:
                params["from"] = source_lang

            response = await self._transport.request(
                "POST",
                f"{self._config.effective_endpoint}/translate",
                headers=headers,
                params=params,
                json=[{"Text": text} for text in texts],
                timeout=timeout,
            )

        try:
            response.raise_for_status("Microsoft Translator")
        except AuthenticationError:
            self._token_cache.invalidate()
            raise
        return self._parse_items(response.body, expected=len(texts))

    async def _auth_headers(self) -> dict[str, str]:
        credential = await self._token_cache.get_token()
        headers = {"Content-Type": "application/json"}
        if self._token_cache.is_static:
            headers["Ocp-Apim-Subscription-Key"] = credential
            if self._config.region:
                headers["Ocp-Apim-Subscription-Region"] = self._config.region
        else:
            headers["Authorization"] = f"Bearer {credential}"
        return headers

    async def _fetch_edge_token(self) -> str:
        """Perform one edge authentication call.

        Raises:
            AuthenticationError: On a non-success status or empty token.
            NetworkError: On transport failure.
        """
        response = await self._transport.request(
            "GET",
            self._config.auth_url,
            headers={"User-Agent": USER_AGENT},
            timeout=self._config.timeout,
        )
        if not response.ok:
            raise AuthenticationError(
                f"Failed to authenticate with Microsoft Translator: HTTP {response.status}"
            )
        token = response.body.strip()
        if not token:
            raise AuthenticationError("Microsoft Translator returned an empty token")
        return token

    @staticmethod
    def _parse_items(body: str, expected: int) -> list[TranslationItem]:
        try:
            items = _RESPONSE_ADAPTER.validate_json(body)
        except ValidationError as e:
            raise ServiceError(
                f"Microsoft Translator returned an unexpected response: {e}"
            ) from e
        if len(items) != expected:
            raise ArrayLengthMismatchError(expected=expected, actual=len(items))
        return items

    @staticmethod
    def _first_text(item: TranslationItem) -> str:
        if not item.translations:
            raise ServiceError("No translation results returned")
        return item.translations[0].text

    async def close(self) -> None:
        """Close the HTTP transport if this translator created it."""
        if self._owns_transport:
            await self._transport.close()
