# SPDX-License-Identifier: Apache-2.0
"""Tests for TranslationManager."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from async_translate.errors import ConfigurationError, TranslatorNotFoundError
from async_translate.langid import Language
from async_translate.manager import TranslationManager
from async_translate.options import TranslateOptions


def make_translator(name: str) -> MagicMock:
    translator = MagicMock()
    translator.name = name
    translator.translate = AsyncMock(return_value=f"{name}:translated")
    translator.translate_batch = AsyncMock(return_value=[f"{name}:a", f"{name}:b"])
    translator.close = AsyncMock()
    return translator


class TestRegistry:
    """Tests for registration and lookup."""

    def test_empty_manager(self) -> None:
        manager = TranslationManager()
        assert len(manager) == 0
        assert manager.list_translators() == []
        assert not manager.has_translator("openai")

    def test_add_and_lookup(self) -> None:
        manager = TranslationManager()
        openai = make_translator("openai")

        manager.add_translator("openai", openai)

        assert manager.has_translator("openai")
        assert "openai" in manager
        assert manager.get_translator("openai") is openai

    def test_list_keeps_registration_order(self) -> None:
        manager = TranslationManager()
        for name in ["microsoft", "openai", "backup"]:
            manager.add_translator(name, make_translator(name))

        assert manager.list_translators() == ["microsoft", "openai", "backup"]
        assert len(manager) == 3

    def test_add_replaces_existing(self) -> None:
        manager = TranslationManager()
        first = make_translator("openai")
        second = make_translator("openai")

        manager.add_translator("openai", first)
        manager.add_translator("openai", second)

        assert manager.get_translator("openai") is second
        assert len(manager) == 1

    def test_unknown_name(self) -> None:
        manager = TranslationManager()

        with pytest.raises(TranslatorNotFoundError) as exc_info:
            manager.get_translator("deepl")

        assert isinstance(exc_info.value, ConfigurationError)
        assert exc_info.value.name == "deepl"


class TestDelegation:
    """Tests for translate calls routed by name."""

    @pytest.mark.asyncio
    async def test_translate(self) -> None:
        manager = TranslationManager()
        translator = make_translator("openai")
        manager.add_translator("openai", translator)
        options = TranslateOptions(max_retries=1)

        result = await manager.translate("openai", "Hello", "es", "en", options)

        assert result == "openai:translated"
        translator.translate.assert_awaited_once_with("Hello", "es", "en", options)

    @pytest.mark.asyncio
    async def test_translate_langid(self) -> None:
        manager = TranslationManager()
        translator = make_translator("microsoft")
        manager.add_translator("microsoft", translator)

        result = await manager.translate_langid("microsoft", "Hello", Language.get("zh-CN"))

        assert result == "microsoft:translated"
        translator.translate.assert_awaited_once_with("Hello", "zh-CN", None, None)

    @pytest.mark.asyncio
    async def test_translate_with_langid(self) -> None:
        manager = TranslationManager()
        translator = make_translator("openai")
        manager.add_translator("openai", translator)
        options = TranslateOptions(timeout=5.0)

        await manager.translate_with_langid(
            "openai", "Hello", Language.get("en"), Language.get("ja"), options
        )

        translator.translate.assert_awaited_once_with("Hello", "ja", "en", options)

    @pytest.mark.asyncio
    async def test_translate_langid_unknown_name(self) -> None:
        with pytest.raises(TranslatorNotFoundError):
            await TranslationManager().translate_langid("deepl", "Hello", Language.get("de"))

    @pytest.mark.asyncio
    async def test_translate_batch(self) -> None:
        manager = TranslationManager()
        translator = make_translator("microsoft")
        manager.add_translator("microsoft", translator)

        result = await manager.translate_batch("microsoft", ["a", "b"], "ja")

        assert result == ["microsoft:a", "microsoft:b"]
        translator.translate_batch.assert_awaited_once_with(["a", "b"], "ja", None, None)

    @pytest.mark.asyncio
    async def test_translate_unknown_name(self) -> None:
        manager = TranslationManager()
        manager.add_translator("openai", make_translator("openai"))

        with pytest.raises(TranslatorNotFoundError):
            await manager.translate("microsoft", "Hello", "es")

    @pytest.mark.asyncio
    async def test_close_closes_every_translator(self) -> None:
        translators = [make_translator("a"), make_translator("b")]

        async with TranslationManager() as manager:
            for translator in translators:
                manager.add_translator(translator.name, translator)

        for translator in translators:
            translator.close.assert_awaited_once()
