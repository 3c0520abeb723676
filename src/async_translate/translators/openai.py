# SPDX-License-Identifier: Apache-2.0
"""OpenAI-compatible chat-completions translation backend."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar

from pydantic import BaseModel, ValidationError

from async_translate.core.credential_pool import CredentialPool
from async_translate.core.retry import RetryExecutor
from async_translate.core.transport import HttpTransport
from async_translate.errors import ServiceError
from async_translate.options import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT, TranslateOptions
from async_translate.translators.base import LanguageTagMixin, is_blank, require_language

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-3.5-turbo"


class ChatMessage(BaseModel):
    role: str = "assistant"
    content: str | None = None


class ChatChoice(BaseModel):
    message: ChatMessage


class ChatCompletion(BaseModel):
    """The subset of a chat-completions response the translator reads."""

    choices: list[ChatChoice]


@dataclass
class OpenAIConfig:
    """Configuration for OpenAITranslator.

    Attributes:
        api_keys: API keys, rotated round-robin. Each key gets its own
            concurrency and RPM accounting.
        base_url: API base URL (any OpenAI-compatible endpoint).
        model: Chat model name.
        rpm_limit: Requests per minute per key, 0 disables the limit.
        concurrent_limit: Simultaneous requests per key.
        system_prompt: Custom system prompt. ``{target_lang}`` and
            ``{source_lang}`` placeholders are substituted.
        temperature: Sampling temperature.
        timeout: Default per-attempt timeout in seconds (None = no timeout).
        max_retries: Default retry count.
    """

    api_keys: list[str] = field(default_factory=list)
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    rpm_limit: int = 60
    concurrent_limit: int = 10
    system_prompt: str | None = None
    temperature: float = 0.3
    timeout: float | None = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES

    API_KEYS_ENV_VAR: ClassVar[str] = "OPENAI_API_KEYS"
    API_KEY_ENV_VAR: ClassVar[str] = "OPENAI_API_KEY"
    BASE_URL_ENV_VAR: ClassVar[str] = "OPENAI_BASE_URL"
    MODEL_ENV_VAR: ClassVar[str] = "OPENAI_MODEL"

    @classmethod
    def from_env(cls, **overrides: Any) -> OpenAIConfig:
        """Build a config from environment variables.

        Priority: keyword argument > environment variable > default.
        ``OPENAI_API_KEYS`` holds a comma-separated key list and wins over
        ``OPENAI_API_KEY``.
        """
        values: dict[str, Any] = {}
        keys = os.environ.get(cls.API_KEYS_ENV_VAR, "")
        key_list = [k.strip() for k in keys.split(",") if k.strip()]
        if not key_list and os.environ.get(cls.API_KEY_ENV_VAR):
            key_list = [os.environ[cls.API_KEY_ENV_VAR].strip()]
        if key_list:
            values["api_keys"] = key_list
        if os.environ.get(cls.BASE_URL_ENV_VAR):
            values["base_url"] = os.environ[cls.BASE_URL_ENV_VAR]
        if os.environ.get(cls.MODEL_ENV_VAR):
            values["model"] = os.environ[cls.MODEL_ENV_VAR]
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def default_options(self) -> TranslateOptions:
        return TranslateOptions(timeout=self.timeout, max_retries=self.max_retries)


class OpenAITranslator(LanguageTagMixin):
    """OpenAI chat-completions translation backend.

    Every request picks the next API key from a round-robin pool and waits
    for that key's admission (concurrency + RPM) before it is sent. Each
    logical translation is retried with exponential backoff on transient
    failures.

    Batches fan out into independent single translations, each with its own
    retry budget. The first item that fails for good aborts the batch.

    Attributes:
        name: Backend identifier ("openai").
    """

    def __init__(
        self,
        config: OpenAIConfig | None = None,
        *,
        transport: HttpTransport | None = None,
        retry: RetryExecutor | None = None,
    ) -> None:
        """Initialize OpenAITranslator.

        Args:
            config: Translator configuration.
            transport: HTTP transport (default: a private aiohttp transport).
            retry: Retry engine (default: 100 ms exponential backoff).

        Raises:
            ConfigurationError: If no API key is configured or limits are invalid.
        """
        self._config = config or OpenAIConfig()
        self._pool = CredentialPool(
            self._config.api_keys,
            concurrency_limit=self._config.concurrent_limit,
            rpm_limit=self._config.rpm_limit,
        )
        self._default_options = self._config.default_options()
        self._owns_transport = transport is None
        self._transport = transport or HttpTransport()
        self._retry = retry or RetryExecutor()

    @property
    def name(self) -> str:
        """Return backend name."""
        return "openai"

    @property
    def config(self) -> OpenAIConfig:
        return self._config

    async def __aenter__(self) -> OpenAITranslator:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def get_system_prompt(self, target_lang: str, source_lang: str | None = None) -> str:
        """Build the system prompt for one request."""
        if self._config.system_prompt is not None:
            return self._config.system_prompt.replace(
                "{target_lang}", target_lang
            ).replace("{source_lang}", source_lang or "the source language")
        if source_lang:
            return (
                f"You are a translator. Translate the following text "
                f"from {source_lang} to {target_lang}."
            )
        return f"You are a translator. Translate the following text to {target_lang}."

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
            target_lang: Target language code.
            source_lang: Source language code, None for auto-detection.
            options: Timeout and retry budget; None uses the config defaults.

        Returns:
            Translated text.

        Raises:
            ConfigurationError: On a missing target language.
            AuthenticationError: If the API key is rejected.
            ServiceError: If the response carries no translation.
            MaxRetriesExceeded: If every attempt failed transiently.
        """
        target_lang = require_language(target_lang)
        # Early return for empty or whitespace-only text
        if is_blank(text):
            return text

        options = options or self._default_options
        return await self._retry.execute(
            lambda: self._attempt(text, target_lang, source_lang, options.timeout),
            options,
        )

    async def translate_batch(
        self,
        texts: Sequence[str],
        target_lang: str,
        source_lang: str | None = None,
        options: TranslateOptions | None = None,
    ) -> list[str]:
        """Translate multiple texts concurrently.

        Args:
            texts: Texts to translate.
            target_lang: Target language code.
            source_lang: Source language code, None for auto-detection.
            options: Applied to every item independently.

        Returns:
            List of translated texts (same order and length as input).

        Raises:
            TranslatorError: The first terminal failure of any item.
        """
        if not texts:
            return []
        require_language(target_lang)

        tasks = [
            asyncio.ensure_future(self.translate(text, target_lang, source_lang, options))
            for text in texts
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

    async def _attempt(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None,
        timeout: float | None,
    ) -> str:
        api_key, governor = self._pool.next()
        async with governor.admit():
            payload = {
                "model": self._config.model,
                "messages": [
                    {
                        "role": "system",
                        "content": self.get_system_prompt(target_lang, source_lang),
                    },
                    {"role": "user", "content": text},
                ],
                "temperature": self._config.temperature,
            }
            response = await self._transport.request(
                "POST",
                f"{self._config.base_url.rstrip('/')}/chat/completions",
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=timeout,
            )

        response.raise_for_status("OpenAI")
        return self._extract_text(response.body)

    @staticmethod
    def _extract_text(body: str) -> str:
        """Extract the first choice's message text.

        Raises:
            ServiceError: If the payload is malformed or carries no text.
        """
        try:
            completion = ChatCompletion.model_validate_json(body)
        except ValidationError as e:
            raise ServiceError(f"OpenAI returned an unexpected response: {e}") from e

        if not completion.choices:
            raise ServiceError("No translation results returned")
        content = completion.choices[0].message.content
        if not content:
            raise ServiceError("OpenAI returned empty response")
        return content

    async def close(self) -> None:
        """Close the HTTP transport if this translator created it."""
        if self._owns_transport:
            await self._transport.close()
