# src/cache/json_store.py — v1
"""JSON file-based cache store (default CACHE_BACKEND=json).

Layout under CACHE_ROOT::

    <document_id>/
        .cache-record.json
        .nodes.json
        <slug>.png | <slug>.jpg
        <slug>.analysis.md
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from designscan.cache.base_cache_store import BaseCacheStore
from designscan.cache.models import CacheRecord

logger = logging.getLogger(__name__)

RECORD_FILENAME = ".cache-record.json"
NODES_FILENAME = ".nodes.json"
ANALYSIS_SUFFIX = ".analysis.md"


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using one directory per document."""

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    async def read(self, document_id: str) -> CacheRecord | None:
        path = self.document_dir(document_id) / RECORD_FILENAME
        if not path.exists():
            return None
        try:
            return CacheRecord.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("Unreadable cache record for %s: %s", document_id, e)
            return None

    async def write(self, document_id: str, record: CacheRecord) -> None:
        path = self._ensure_dir(document_id) / RECORD_FILENAME
        path.write_text(record.model_dump_json(indent=2), encoding="utf-8")

    async def invalidate(self, document_id: str) -> None:
        doc_dir = self.document_dir(document_id)
        if doc_dir.exists():
            shutil.rmtree(doc_dir)
            logger.info("Invalidated cache directory %s", doc_dir)

    async def load_analysis(self, document_id: str, slug: str) -> str | None:
        path = self.document_dir(document_id) / f"{slug}{ANALYSIS_SUFFIX}"
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    async def save_analysis(self, document_id: str, slug: str, text: str) -> None:
        path = self._ensure_dir(document_id) / f"{slug}{ANALYSIS_SUFFIX}"
        path.write_text(text, encoding="utf-8")

    async def load_image(
        self, document_id: str, slug: str, fmt: str
    ) -> bytes | None:
        path = self.document_dir(document_id) / f"{slug}.{fmt}"
        if not path.exists():
            return None
        return path.read_bytes()

    async def save_image(
        self, document_id: str, slug: str, fmt: str, data: bytes
    ) -> None:
        path = self._ensure_dir(document_id) / f"{slug}.{fmt}"
        path.write_bytes(data)

    async def load_nodes(
        self, document_id: str
    ) -> dict[str, dict[str, Any] | None] | None:
        path = self.document_dir(document_id) / NODES_FILENAME
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Unreadable node cache for %s: %s", document_id, e)
            return None
        return data if isinstance(data, dict) else None

    async def save_nodes(
        self, document_id: str, nodes: dict[str, dict[str, Any] | None]
    ) -> None:
        path = self._ensure_dir(document_id) / NODES_FILENAME
        path.write_text(json.dumps(nodes), encoding="utf-8")

    def document_dir(self, document_id: str) -> Path:
        """Return the namespace directory for a document."""
        safe_id = document_id.replace("/", "_").replace("\\", "_")
        return self._root / safe_id

    def _ensure_dir(self, document_id: str) -> Path:
        doc_dir = self.document_dir(document_id)
        doc_dir.mkdir(parents=True, exist_ok=True)
        return doc_dir
