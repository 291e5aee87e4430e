# src/cache/memory_store.py — v1
"""In-process cache store (CACHE_BACKEND=memory).

Nothing survives the process. Used for one-shot runs and tests.
"""

from __future__ import annotations

import copy
from typing import Any

from designscan.cache.base_cache_store import BaseCacheStore
from designscan.cache.models import CacheRecord


class MemoryCacheStore(BaseCacheStore):
    """Dict-backed cache store, one namespace per document."""

    def __init__(self) -> None:
        self._records: dict[str, CacheRecord] = {}
        self._analyses: dict[str, dict[str, str]] = {}
        self._images: dict[str, dict[str, bytes]] = {}
        self._nodes: dict[str, dict[str, dict[str, Any] | None]] = {}

    async def read(self, document_id: str) -> CacheRecord | None:
        return self._records.get(document_id)

    async def write(self, document_id: str, record: CacheRecord) -> None:
        self._records[document_id] = record

    async def invalidate(self, document_id: str) -> None:
        self._records.pop(document_id, None)
        self._analyses.pop(document_id, None)
        self._images.pop(document_id, None)
        self._nodes.pop(document_id, None)

    async def load_analysis(self, document_id: str, slug: str) -> str | None:
        return self._analyses.get(document_id, {}).get(slug)

    async def save_analysis(self, document_id: str, slug: str, text: str) -> None:
        self._analyses.setdefault(document_id, {})[slug] = text

    async def load_image(
        self, document_id: str, slug: str, fmt: str
    ) -> bytes | None:
        return self._images.get(document_id, {}).get(f"{slug}.{fmt}")

    async def save_image(
        self, document_id: str, slug: str, fmt: str, data: bytes
    ) -> None:
        self._images.setdefault(document_id, {})[f"{slug}.{fmt}"] = data

    async def load_nodes(
        self, document_id: str
    ) -> dict[str, dict[str, Any] | None] | None:
        nodes = self._nodes.get(document_id)
        return copy.deepcopy(nodes) if nodes is not None else None

    async def save_nodes(
        self, document_id: str, nodes: dict[str, dict[str, Any] | None]
    ) -> None:
        self._nodes[document_id] = copy.deepcopy(nodes)
