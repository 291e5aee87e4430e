# src/cache/base_cache_store.py — v1
"""Abstract cache store interface.

One namespace per document: the freshness record, the cached node trees and
per-artifact images and analyses. ``invalidate`` removes the whole namespace.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from designscan.cache.models import CacheRecord


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends."""

    # --- Document record ---

    @abstractmethod
    async def read(self, document_id: str) -> CacheRecord | None:
        """Return the stored record, or None if absent or unreadable."""

    @abstractmethod
    async def write(self, document_id: str, record: CacheRecord) -> None:
        """Store the freshness record for a document."""

    @abstractmethod
    async def invalidate(self, document_id: str) -> None:
        """Drop every cached entry of a document."""

    # --- Per-artifact analysis ---

    @abstractmethod
    async def load_analysis(self, document_id: str, slug: str) -> str | None:
        """Return cached analysis text for an artifact slug."""

    @abstractmethod
    async def save_analysis(self, document_id: str, slug: str, text: str) -> None:
        """Persist analysis text for an artifact slug."""

    # --- Per-artifact image ---

    @abstractmethod
    async def load_image(
        self, document_id: str, slug: str, fmt: str
    ) -> bytes | None:
        """Return cached rendered image bytes."""

    @abstractmethod
    async def save_image(
        self, document_id: str, slug: str, fmt: str, data: bytes
    ) -> None:
        """Persist rendered image bytes."""

    # --- Node trees ---

    @abstractmethod
    async def load_nodes(
        self, document_id: str
    ) -> dict[str, dict[str, Any] | None] | None:
        """Return cached raw node trees keyed by requested node id.

        An id mapped to None was requested but not found upstream.
        """

    @abstractmethod
    async def save_nodes(
        self, document_id: str, nodes: dict[str, dict[str, Any] | None]
    ) -> None:
        """Persist raw node trees keyed by requested node id."""
