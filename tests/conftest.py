# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Wraps the stand-in collaborators of ``tests.factories`` in fixtures and
provides settings, a mock generator and temp directories. No network I/O.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from designscan.cache.memory_store import MemoryCacheStore
from designscan.config.settings import Settings
from designscan.llm.models import TextGenerationResponse
from tests.factories import (
    FakeCommentService,
    FakeContentService,
    FakeImageService,
    ScriptedGenerator,
    make_node,
)

# === FIXTURES ===


@pytest.fixture
def content_service() -> FakeContentService:
    return FakeContentService()


@pytest.fixture
def comment_service() -> FakeCommentService:
    return FakeCommentService()


@pytest.fixture
def image_service() -> FakeImageService:
    return FakeImageService()


@pytest.fixture
def generator() -> ScriptedGenerator:
    return ScriptedGenerator()


@pytest.fixture
def memory_store() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings isolated from any .env file."""
    return Settings(_env_file=None, cache_root=tmp_path / "cache")


@pytest.fixture
def mock_generator() -> AsyncMock:
    """Mock BaseTextGenerator with a fixed response."""
    gen = AsyncMock()
    gen.generate = AsyncMock(
        return_value=TextGenerationResponse(text="Mock analysis", provider="mock")
    )
    gen.supports_parallel_requests = True
    gen.provider_name = "mock"
    return gen


@pytest.fixture
def section_document() -> list[dict[str, Any]]:
    """``sectionA`` holding two responsive variants of the login screen."""
    return [
        make_node(
            "sectionA", "sectionA", "SECTION", (0, 0, 2000, 1200),
            children=[
                make_node("F1", "Login 1024px", "FRAME", (0, 0, 1024, 800)),
                make_node("F2", "Login 320px", "FRAME", (1100, 0, 320, 640)),
            ],
        )
    ]


@pytest.fixture
def tmp_cache_dir(tmp_path: Path) -> Path:
    """Temporary cache directory."""
    cache = tmp_path / "cache"
    cache.mkdir()
    return cache
