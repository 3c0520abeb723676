#!/usr/bin/env python3
# SPDX-License-Identifier: Apache-2.0
"""Translation example script

Shows the basic use of async-translate: register backends with a
TranslationManager, translate a single text, a batch and a text addressed
by BCP-47 language tags, and read the per-attempt error history when the
retry budget runs out.

Usage:
    cd examples
    python translate_text.py

Environment variables (loaded from .env automatically):
    OPENAI_API_KEY / OPENAI_API_KEYS: Required for the OpenAI backend
    OPENAI_MODEL: Chat model (default: gpt-3.5-turbo)
    MICROSOFT_TRANSLATOR_KEY: Optional, edge tokens are used without it
"""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path (for development)
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

load_dotenv(PROJECT_ROOT / ".env")

from async_translate import (  # noqa: E402
    MaxRetriesExceeded,
    MicrosoftConfig,
    MicrosoftTranslator,
    OpenAIConfig,
    OpenAITranslator,
    TranslateOptions,
    TranslationManager,
    TranslatorError,
    parse_language_tag,
)

# =============================================================================
# Settings - edit these to try different behavior
# =============================================================================

# Languages
SOURCE_LANG = None  # None = auto-detect
TARGET_LANG = "ja"

# Typed language tags for the langid calls
TAG_SOURCE = "en"
TAG_TARGET = "zh-Hant"

TEXTS = [
    "Hello, world!",
    "Rate limits keep shared API keys healthy.",
    "",
    "Translation results keep the input order.",
]

# Per-call resilience
OPTIONS = TranslateOptions(timeout=20.0, max_retries=2)

# =============================================================================


async def main() -> None:
    """Main entry point."""
    async with TranslationManager() as manager:
        manager.add_translator("microsoft", MicrosoftTranslator(MicrosoftConfig.from_env()))

        openai_config = OpenAIConfig.from_env(rpm_limit=30, concurrent_limit=5)
        if openai_config.api_keys:
            manager.add_translator("openai", OpenAITranslator(openai_config))
        else:
            print("OPENAI_API_KEY not set, skipping the OpenAI backend")

        print("=" * 60)
        print(f"Backends:  {', '.join(manager.list_translators())}")
        print(f"Languages: {SOURCE_LANG or 'auto'} -> {TARGET_LANG}")
        print("=" * 60)

        for name in manager.list_translators():
            print(f"\n[{name}]")
            try:
                single = await manager.translate(
                    name, TEXTS[0], TARGET_LANG, SOURCE_LANG, OPTIONS
                )
                print(f"  single: {single}")

                results = await manager.translate_batch(
                    name, TEXTS, TARGET_LANG, SOURCE_LANG, OPTIONS
                )
                for original, translated in zip(TEXTS, results):
                    print(f"  {original!r} -> {translated!r}")

                tagged = await manager.translate_with_langid(
                    name,
                    TEXTS[0],
                    parse_language_tag(TAG_SOURCE),
                    parse_language_tag(TAG_TARGET),
                    OPTIONS,
                )
                print(f"  {TAG_SOURCE} -> {TAG_TARGET}: {tagged}")
            except MaxRetriesExceeded as e:
                print(f"  gave up after {e.attempts} attempts:")
                for attempt, error in enumerate(e.errors, 1):
                    print(f"    {attempt}: {type(error).__name__}: {error}")
            except TranslatorError as e:
                print(f"  failed: {e}")

    print("\nDone!")


if __name__ == "__main__":
    if os.environ.get("ASYNC_TRANSLATE_DEBUG"):
        import logging

        logging.basicConfig(level=logging.DEBUG)
    asyncio.run(main())
