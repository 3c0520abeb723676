# SPDX-License-Identifier: Apache-2.0
"""Name-keyed registry of translators."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from async_translate.errors import TranslatorNotFoundError
from async_translate.langid import Language, language_code
from async_translate.options import TranslateOptions
from async_translate.translators.base import Translator

logger = logging.getLogger(__name__)


class TranslationManager:
    """Holds translators by name and delegates calls to them."""

    def __init__(self) -> None:
        self._translators: dict[str, Translator] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._translators

    def __len__(self) -> int:
        return len(self._translators)

    async def __aenter__(self) -> TranslationManager:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def add_translator(self, name: str, translator: Translator) -> None:
        """Register a translator, replacing any previous one with that name."""
        if name in self._translators:
            logger.debug("Replacing translator '%s'", name)
        self._translators[name] = translator

    def get_translator(self, name: str) -> Translator:
        """Return the translator registered under ``name``.

        Raises:
            TranslatorNotFoundError: If no translator has that name.
        """
        try:
            return self._translators[name]
        except KeyError:
            raise TranslatorNotFoundError(name) from None

    def has_translator(self, name: str) -> bool:
        return name in self._translators

    def list_translators(self) -> list[str]:
        """Return registered names in registration order."""
        return list(self._translators)

    async def translate(
        self,
        name: str,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        options: TranslateOptions | None = None,
    ) -> str:
        """Translate text with the named translator."""
        translator = self.get_translator(name)
        return await translator.translate(text, target_lang, source_lang, options)

    async def translate_langid(
        self,
        name: str,
        text: str,
        target_lang: Language,
        options: TranslateOptions | None = None,
    ) -> str:
        """Translate text into a parsed language tag with the named translator."""
        return await self.translate_with_langid(name, text, None, target_lang, options)

    async def translate_with_langid(
        self,
        name: str,
        text: str,
        source_lang: Language | None,
        target_lang: Language,
        options: TranslateOptions | None = None,
    ) -> str:
        """Translate text between parsed language tags with the named translator.

        Works with any registered translator; tags are rendered to string codes.

        Raises:
            TranslatorNotFoundError: If no translator has that name.
        """
        translator = self.get_translator(name)
        source = language_code(source_lang) if source_lang is not None else None
        return await translator.translate(
            text, language_code(target_lang), source, options
        )

    async def translate_batch(
        self,
        name: str,
        texts: Sequence[str],
        target_lang: str,
        source_lang: str | None = None,
        options: TranslateOptions | None = None,
    ) -> list[str]:
        """Translate several texts with the named translator."""
        translator = self.get_translator(name)
        return await translator.translate_batch(texts, target_lang, source_lang, options)

    async def close(self) -> None:
        """Close every registered translator that holds resources."""
        for translator in self._translators.values():
            close = getattr(translator, "close", None)
            if close is not None:
                await close()
