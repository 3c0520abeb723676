# SPDX-License-Identifier: Apache-2.0
"""BCP-47 language tags for the typed translate entry points.

Backends take plain string codes ("zh-Hans", "en"). Callers that prefer
parsed tags pass ``langcodes.Language`` objects, which are rendered back to
their standard string form before the request is built.
"""

from __future__ import annotations

from langcodes import Language

from async_translate.errors import ConfigurationError

__all__ = ["Language", "language_code", "parse_language_tag"]


def parse_language_tag(tag: str) -> Language:
    """Parse a BCP-47 tag.

    Args:
        tag: Language tag such as "zh-CN" or "en".

    Returns:
        Parsed Language.

    Raises:
        ConfigurationError: If the tag is empty or malformed.
    """
    if not tag or not tag.strip():
        raise ConfigurationError("Language tag is required")
    try:
        return Language.get(tag.strip())
    except ValueError as e:
        raise ConfigurationError(f"Invalid language tag '{tag}': {e}") from e


def language_code(language: Language | str) -> str:
    """Return the standard string form of a tag, e.g. ``zh-Hans``."""
    if isinstance(language, str):
        language = parse_language_tag(language)
    return language.to_tag()
