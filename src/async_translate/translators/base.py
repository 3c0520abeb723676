# SPDX-License-Identifier: Apache-2.0
"""Protocol definition and shared helpers for translation backends."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from async_translate.errors import ConfigurationError
from async_translate.langid import Language, language_code
from async_translate.options import TranslateOptions


@runtime_checkable
class Translator(Protocol):
    """Protocol definition for translation backends.

    All translator implementations must conform to this protocol.
    """

    @property
    def name(self) -> str:
        """Backend name ("openai", "microsoft")."""
        ...

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
            options: Timeout and retry budget; None uses the backend defaults.

        Returns:
            Translated text.

        Raises:
            TranslatorError: On translation failure.
        """
        ...

    async def translate_batch(
        self,
        texts: Sequence[str],
        target_lang: str,
        source_lang: str | None = None,
        options: TranslateOptions | None = None,
    ) -> list[str]:
        """Translate multiple texts.

        Args:
            texts: Texts to translate.
            target_lang: Target language code.
            source_lang: Source language code, None for auto-detection.
            options: Timeout and retry budget; None uses the backend defaults.

        Returns:
            List of translated texts (same order and length as input).

        Raises:
            TranslatorError: On translation failure.
        """
        ...


class LanguageTagMixin:
    """Typed entry points taking parsed language tags.

    Mixed into backends that implement ``translate``; tags are rendered to
    their standard string codes and the call is delegated.
    """

    async def translate_langid(
        self,
        text: str,
        target_lang: Language,
        options: TranslateOptions | None = None,
    ) -> str:
        """Translate text into ``target_lang``, auto-detecting the source."""
        return await self.translate_with_langid(text, None, target_lang, options)

    async def translate_with_langid(
        self,
        text: str,
        source_lang: Language | None,
        target_lang: Language,
        options: TranslateOptions | None = None,
    ) -> str:
        """Translate text between parsed language tags.

        Args:
            text: Text to translate.
            source_lang: Source language tag, None for auto-detection.
            target_lang: Target language tag.
            options: Timeout and retry budget; None uses the backend defaults.

        Returns:
            Translated text.
        """
        source = language_code(source_lang) if source_lang is not None else None
        return await self.translate(  # type: ignore[attr-defined]
            text, language_code(target_lang), source, options
        )


def is_blank(text: str) -> bool:
    """True for empty or whitespace-only text, which is never sent out."""
    return not text or not text.strip()


def require_language(target_lang: str) -> str:
    """Validate a target language code before any network activity.

    Raises:
        ConfigurationError: If the code is empty.
    """
    if not target_lang or not target_lang.strip():
        raise ConfigurationError("Target language is required")
    return target_lang.strip()
