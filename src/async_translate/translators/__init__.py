# SPDX-License-Identifier: Apache-2.0
"""Translation backend modules.

This module provides translation backends for OpenAI-compatible chat models
and Microsoft Translator.

Usage:
    # Microsoft Translator (no API key required, uses an edge token)
    from async_translate.translators import MicrosoftTranslator
    translator = MicrosoftTranslator()
    result = await translator.translate("Hello", "zh-Hans")

    # OpenAI (one or more API keys, rotated round-robin)
    from async_translate.translators import OpenAIConfig, OpenAITranslator
    translator = OpenAITranslator(OpenAIConfig(api_keys=["sk-..."]))
    result = await translator.translate("Hello", "ja", source_lang="en")
"""

from async_translate.translators.base import Translator
from async_translate.translators.microsoft import (
    DetectedLanguage,
    MicrosoftConfig,
    MicrosoftTranslator,
    Translation,
    TranslationItem,
)
from async_translate.translators.openai import OpenAIConfig, OpenAITranslator

__all__ = [
    # Protocol
    "Translator",
    # Microsoft
    "DetectedLanguage",
    "MicrosoftConfig",
    "MicrosoftTranslator",
    "Translation",
    "TranslationItem",
    # OpenAI
    "OpenAIConfig",
    "OpenAITranslator",
]
