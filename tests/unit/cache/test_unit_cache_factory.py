# tests/unit/cache/test_cache_factory.py — v1
"""Tests for cache/cache_factory.py."""

from __future__ import annotations

import pytest

from designscan.cache.cache_factory import create_cache_store
from designscan.cache.json_store import JsonCacheStore
from designscan.cache.memory_store import MemoryCacheStore
from designscan.config.settings import Settings


class TestCreateCacheStore:
    def test_default_json(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        store = create_cache_store()
        assert isinstance(store, JsonCacheStore)
        assert store.root == tmp_path / ".designscan" / "cache"

    def test_json_backend_uses_cache_root(self, tmp_path):
        s = Settings(_env_file=None, cache_root=tmp_path / "c")
        store = create_cache_store(s)
        assert isinstance(store, JsonCacheStore)
        assert store.root == tmp_path / "c"

    def test_memory_backend(self):
        s = Settings(_env_file=None, cache_backend="memory")
        assert isinstance(create_cache_store(s), MemoryCacheStore)

    def test_unsupported_backend(self):
        s = Settings(_env_file=None).model_copy(update={"cache_backend": "redis"})
        with pytest.raises(ValueError, match="Unsupported cache backend"):
            create_cache_store(s)
