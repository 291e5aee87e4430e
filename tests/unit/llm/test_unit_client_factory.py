# tests/unit/llm/test_client_factory.py — v1
"""Tests for llm/client_factory.py."""

from __future__ import annotations

import pytest

from designscan.config.settings import Settings
from designscan.llm.adapters.anthropic_adapter import AnthropicAdapter
from designscan.llm.adapters.openai_adapter import OpenAIAdapter
from designscan.llm.client_factory import (
    _PROVIDER_REGISTRY,
    UnsupportedProviderError,
    create_text_generator,
    register_provider,
)


class TestCreateTextGenerator:
    def test_default_anthropic(self):
        assert isinstance(create_text_generator(), AnthropicAdapter)

    def test_from_settings(self):
        s = Settings(_env_file=None, llm_provider="openai", llm_model="gpt-4o-mini", openai_api_key="sk")
        gen = create_text_generator(settings=s)
        assert isinstance(gen, OpenAIAdapter)
        assert gen._model == "gpt-4o-mini"
        assert gen._api_key == "sk"

    def test_explicit_provider_wins(self):
        s = Settings(_env_file=None, llm_provider="openai")
        assert isinstance(create_text_generator("anthropic", settings=s), AnthropicAdapter)

    def test_unknown_provider(self):
        with pytest.raises(UnsupportedProviderError, match="Available"):
            create_text_generator("mystery")


class TestRegisterProvider:
    def test_custom_provider(self, monkeypatch):
        monkeypatch.setitem(_PROVIDER_REGISTRY, "fake", "")
        register_provider("fake", "designscan.llm.adapters.callable_adapter.CallableTextGenerator")
        gen = create_text_generator("fake", fn=lambda req: "ok")
        assert gen.provider_name == "callable"
