# SPDX-License-Identifier: Apache-2.0
"""
async-translate - CLI Tool

Translates text with Microsoft Translator or an OpenAI-compatible model.

Usage:
    async-translate <text> [<text> ...] [options]

Examples:
    async-translate "Hello, world!" -t zh-Hans          # Microsoft (default)
    async-translate "Hello" "World" -t ja -s en          # Batch with source language
    async-translate "Hello" -b openai -t de --max-retries 5
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import NoReturn

from async_translate.errors import ConfigurationError, TranslatorError
from async_translate.manager import TranslationManager
from async_translate.options import TranslateOptions
from async_translate.translators.base import Translator
from async_translate.translators.microsoft import MicrosoftConfig, MicrosoftTranslator
from async_translate.translators.openai import OpenAIConfig, OpenAITranslator

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Argument list (default: ``sys.argv[1:]``).

    Returns:
        Parsed argument Namespace.
    """
    parser = argparse.ArgumentParser(
        prog="async-translate",
        description="Translate text with Microsoft Translator or OpenAI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s "Hello" -t zh-Hans                   # Microsoft Translator (default)
  %(prog)s "Hello" "Goodbye" -t ja -s en        # Several texts, fixed source
  %(prog)s "Hello" -b openai -t de              # OpenAI chat model
  %(prog)s - -t fr < input.txt                  # Read one text from stdin

Environment Variables:
  OPENAI_API_KEY               OpenAI API key (or OPENAI_API_KEYS, comma-separated)
  OPENAI_BASE_URL              OpenAI-compatible endpoint
  OPENAI_MODEL                 Chat model name
  MICROSOFT_TRANSLATOR_KEY     Microsoft subscription key (optional)
  MICROSOFT_TRANSLATOR_REGION  Microsoft subscription region (optional)
""",
    )

    parser.add_argument(
        "texts",
        nargs="+",
        help="Texts to translate ('-' reads one text from stdin)",
    )

    parser.add_argument(
        "-b",
        "--backend",
        default="microsoft",
        choices=["microsoft", "openai"],
        help="Translation backend (default: microsoft)",
    )

    # Language options
    parser.add_argument(
        "-t",
        "--target",
        default="en",
        help="Target language code (default: en)",
    )
    parser.add_argument(
        "-s",
        "--source",
        default=None,
        help="Source language code (default: auto-detect)",
    )

    # Resilience options
    resilience_group = parser.add_argument_group("Resilience options")
    resilience_group.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Per-attempt timeout in seconds (default: 30)",
    )
    resilience_group.add_argument(
        "--no-timeout",
        action="store_true",
        help="Disable the per-attempt timeout",
    )
    resilience_group.add_argument(
        "--max-retries",
        type=int,
        default=3,
        help="Retries after the first attempt (default: 3)",
    )
    resilience_group.add_argument(
        "--concurrent-limit",
        type=int,
        default=10,
        help="Simultaneous requests per credential (default: 10)",
    )
    resilience_group.add_argument(
        "--rpm-limit",
        type=int,
        default=None,
        help="Requests per minute per credential (default: 60 for openai, unlimited for microsoft)",
    )

    # OpenAI options
    openai_group = parser.add_argument_group("OpenAI options")
    openai_group.add_argument(
        "--openai-api-key",
        action="append",
        dest="openai_api_keys",
        metavar="KEY",
        help="OpenAI API key; repeat to rotate several keys (or set OPENAI_API_KEY)",
    )
    openai_group.add_argument(
        "--openai-base-url",
        help="OpenAI-compatible API base URL",
    )
    openai_group.add_argument(
        "--openai-model",
        help="Chat model (default: OPENAI_MODEL or gpt-3.5-turbo)",
    )
    openai_group.add_argument(
        "--openai-prompt",
        help="Custom system prompt ({target_lang} is substituted)",
    )
    openai_group.add_argument(
        "--openai-prompt-file",
        type=Path,
        help="File containing a custom system prompt",
    )

    # Microsoft options
    microsoft_group = parser.add_argument_group("Microsoft options")
    microsoft_group.add_argument(
        "--microsoft-api-key",
        help="Subscription key (default: temporary edge token)",
    )
    microsoft_group.add_argument(
        "--microsoft-region",
        help="Subscription region",
    )
    microsoft_group.add_argument(
        "--microsoft-endpoint",
        help="Service endpoint",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output (debug logging)",
    )

    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> TranslateOptions:
    """Build per-call options from CLI arguments.

    Raises:
        ConfigurationError: On invalid timeout or retry values.
    """
    timeout = None if args.no_timeout else args.timeout
    return TranslateOptions(timeout=timeout, max_retries=args.max_retries)


def create_translator(args: argparse.Namespace) -> Translator:
    """Create translator based on backend selection.

    Args:
        args: Command line arguments.

    Returns:
        Translator instance.

    Raises:
        ConfigurationError: If the configuration is incomplete or invalid.
    """
    if args.backend == "openai":
        system_prompt = None
        if args.openai_prompt_file:
            if not args.openai_prompt_file.exists():
                raise ConfigurationError(
                    f"Prompt file not found: {args.openai_prompt_file}"
                )
            system_prompt = args.openai_prompt_file.read_text(encoding="utf-8")
        elif args.openai_prompt:
            system_prompt = args.openai_prompt

        openai_config = OpenAIConfig.from_env(
            api_keys=args.openai_api_keys,
            base_url=args.openai_base_url,
            model=args.openai_model,
            system_prompt=system_prompt,
            concurrent_limit=args.concurrent_limit,
            rpm_limit=args.rpm_limit,
        )
        if not openai_config.api_keys:
            raise ConfigurationError(
                "OpenAI API key is required for --backend openai.\n"
                "  Set --openai-api-key option or OPENAI_API_KEY environment variable.\n"
                "  Or use --backend microsoft for API-key-free translation."
            )
        return OpenAITranslator(openai_config)

    microsoft_config = MicrosoftConfig.from_env(
        api_key=args.microsoft_api_key,
        region=args.microsoft_region,
        endpoint=args.microsoft_endpoint,
        concurrent_limit=args.concurrent_limit,
        rpm_limit=args.rpm_limit,
    )
    return MicrosoftTranslator(microsoft_config)


def read_texts(args: argparse.Namespace) -> list[str]:
    """Resolve '-' arguments to stdin content."""
    texts: list[str] = []
    for text in args.texts:
        if text == "-":
            texts.append(sys.stdin.read().strip())
        else:
            texts.append(text)
    return texts


async def run(args: argparse.Namespace) -> int:
    """Translate the given texts and print one result per line.

    Args:
        args: Command line arguments.

    Returns:
        Exit code (0: success, 1: failure).
    """
    try:
        options = build_options(args)
        translator = create_translator(args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    texts = read_texts(args)

    async with TranslationManager() as manager:
        manager.add_translator(args.backend, translator)
        try:
            if len(texts) == 1:
                results = [
                    await manager.translate(
                        args.backend, texts[0], args.target, args.source, options
                    )
                ]
            else:
                results = await manager.translate_batch(
                    args.backend, texts, args.target, args.source, options
                )
        except TranslatorError as e:
            print(f"Error: Translation failed: {e}", file=sys.stderr)
            if args.verbose:
                logger.exception("Translation failed")
            return 1

    for result in results:
        print(result)
    return 0


def main() -> NoReturn:
    """Main entry point."""
    args = parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    exit_code = asyncio.run(run(args))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
