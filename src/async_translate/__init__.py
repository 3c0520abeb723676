# SPDX-License-Identifier: Apache-2.0
"""Concurrent translation client for OpenAI-compatible models and Microsoft Translator.

Usage:
    from async_translate import (
        MicrosoftTranslator,
        OpenAIConfig,
        OpenAITranslator,
        TranslationManager,
    )

    async with TranslationManager() as manager:
        manager.add_translator("microsoft", MicrosoftTranslator())
        manager.add_translator(
            "openai", OpenAITranslator(OpenAIConfig(api_keys=["sk-..."]))
        )
        result = await manager.translate("microsoft", "Hello, world!", "zh-Hans")
"""

from async_translate.errors import (
    ArrayLengthMismatchError,
    AuthenticationError,
    ConfigurationError,
    HttpError,
    MaxRetriesExceeded,
    NetworkError,
    ServiceError,
    TranslationTimeoutError,
    TranslatorError,
    TranslatorNotFoundError,
)
from async_translate.langid import Language, language_code, parse_language_tag
from async_translate.manager import TranslationManager
from async_translate.options import TranslateOptions
from async_translate.translators import (
    MicrosoftConfig,
    MicrosoftTranslator,
    OpenAIConfig,
    OpenAITranslator,
    Translator,
)

__version__ = "0.1.0"

__all__ = [
    # Registry and protocol
    "TranslationManager",
    "Translator",
    "TranslateOptions",
    # Language tags
    "Language",
    "language_code",
    "parse_language_tag",
    # Backends
    "MicrosoftConfig",
    "MicrosoftTranslator",
    "OpenAIConfig",
    "OpenAITranslator",
    # Exceptions
    "ArrayLengthMismatchError",
    "AuthenticationError",
    "ConfigurationError",
    "HttpError",
    "MaxRetriesExceeded",
    "NetworkError",
    "ServiceError",
    "TranslationTimeoutError",
    "TranslatorError",
    "TranslatorNotFoundError",
]
