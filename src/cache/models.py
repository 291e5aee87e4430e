# src/cache/models.py — v1
"""Cache domain models: CacheRecord, CacheValidation."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from designscan.upstream.models import FileMetadata


class CacheRecord(BaseModel):
    """Per-document freshness marker, written after a fully successful run."""

    document_id: str
    upstream_timestamp: datetime
    cached_at: datetime
    version: str | None = None
    last_editor: str | None = None


class CacheValidation(BaseModel):
    """Outcome of validating one document's cache against the upstream probe."""

    document_id: str
    valid: bool
    was_invalidated: bool = False
    had_record: bool = False
    metadata: FileMetadata
    record: CacheRecord | None = None
