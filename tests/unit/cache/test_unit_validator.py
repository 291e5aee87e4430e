# tests/unit/cache/test_validator.py — v1
"""Tests for cache/validator.py — timestamp comparison and commit."""

from __future__ import annotations

from datetime import timedelta

import pytest

from designscan.cache.models import CacheRecord
from designscan.cache.validator import CacheValidator
from designscan.core.errors import TransientUpstreamError, UpstreamAccessError

from tests.factories import T0, T1


@pytest.fixture
def validator(content_service, memory_store) -> CacheValidator:
    content_service.add_document("doc1", [], timestamp=T0)
    return CacheValidator(content_service, memory_store)


async def _seed(store, upstream_ts, document_id="doc1"):
    await store.write(
        "doc1",
        CacheRecord(document_id=document_id, upstream_timestamp=upstream_ts, cached_at=T1),
    )
    await store.save_analysis("doc1", "login_1-2", "cached text")


class TestValidate:
    @pytest.mark.asyncio
    async def test_equal_timestamp_is_valid(self, validator, memory_store):
        await _seed(memory_store, T0)
        v = await validator.validate("doc1")
        assert v.valid is True
        assert v.had_record is True
        assert v.was_invalidated is False
        assert v.record is not None
        assert await memory_store.load_analysis("doc1", "login_1-2") == "cached text"

    @pytest.mark.asyncio
    async def test_newer_stored_timestamp_is_valid(self, validator, memory_store):
        await _seed(memory_store, T0 + timedelta(hours=1))
        assert (await validator.validate("doc1")).valid is True

    @pytest.mark.asyncio
    async def test_upstream_change_invalidates(self, validator, memory_store):
        await _seed(memory_store, T0 - timedelta(days=1))
        v = await validator.validate("doc1")
        assert v.valid is False
        assert v.was_invalidated is True
        assert await memory_store.read("doc1") is None
        assert await memory_store.load_analysis("doc1", "login_1-2") is None

    @pytest.mark.asyncio
    async def test_no_record(self, validator):
        v = await validator.validate("doc1")
        assert v.valid is False
        assert v.had_record is False
        assert v.was_invalidated is False
        assert v.metadata.upstream_timestamp == T0

    @pytest.mark.asyncio
    async def test_mismatched_document_id(self, validator, memory_store):
        await _seed(memory_store, T0, document_id="other")
        v = await validator.validate("doc1")
        assert v.valid is False
        assert v.was_invalidated is True
        assert await memory_store.load_analysis("doc1", "login_1-2") is None

    @pytest.mark.asyncio
    async def test_probe_error_propagates_cache_untouched(
        self, validator, content_service, memory_store
    ):
        await _seed(memory_store, T0 - timedelta(days=1))
        content_service.probe_error = TransientUpstreamError("boom", status_code=503)
        with pytest.raises(TransientUpstreamError):
            await validator.validate("doc1")
        assert await memory_store.read("doc1") is not None
        assert await memory_store.load_analysis("doc1", "login_1-2") == "cached text"

    @pytest.mark.asyncio
    async def test_unknown_document(self, content_service, memory_store):
        validator = CacheValidator(content_service, memory_store)
        with pytest.raises(UpstreamAccessError):
            await validator.validate("missing")


class TestCommit:
    @pytest.mark.asyncio
    async def test_writes_probe_metadata(self, validator, memory_store):
        v = await validator.validate("doc1")
        rec = await validator.commit(v, now=T1)
        assert rec.upstream_timestamp == T0
        assert rec.cached_at == T1
        assert rec.version == "1"
        assert rec.last_editor == "designer"
        assert await memory_store.read("doc1") == rec

    @pytest.mark.asyncio
    async def test_second_validation_is_valid(self, validator):
        await validator.commit(await validator.validate("doc1"), now=T1)
        assert (await validator.validate("doc1")).valid is True
