# src/cache/validator.py — v1
"""Timestamp-based cache validation for one document.

The metadata probe is cheap; the content and image fetches are not. A cache
whose stored upstream timestamp is at least as new as the probed one lets
the caller skip the expensive path. A newer upstream timestamp wipes the
whole document namespace, since the timestamp is document-granular.

Probe errors propagate untouched: neither "valid" nor "invalid" is guessed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from designscan.cache.base_cache_store import BaseCacheStore
from designscan.cache.models import CacheRecord, CacheValidation
from designscan.upstream.base_services import BaseContentService

logger = logging.getLogger(__name__)


class CacheValidator:
    """Decide whether a document's cached artifacts can be reused."""

    def __init__(
        self, content_service: BaseContentService, cache_store: BaseCacheStore
    ) -> None:
        self._content = content_service
        self._store = cache_store

    async def validate(self, document_id: str) -> CacheValidation:
        """Probe upstream and compare with the stored record.

        Raises:
            TransientUpstreamError: Probe throttled or network failure.
            UpstreamAccessError: Document forbidden or missing.
        """
        record = await self._store.read(document_id)
        metadata = await self._content.probe_metadata(document_id)

        if record is None:
            logger.info("No cache record for %s", document_id)
            return CacheValidation(
                document_id=document_id, valid=False, metadata=metadata
            )

        if record.document_id != document_id:
            logger.warning(
                "Cache record for %s names document %s, discarding",
                document_id, record.document_id,
            )
            await self._store.invalidate(document_id)
            return CacheValidation(
                document_id=document_id,
                valid=False,
                was_invalidated=True,
                had_record=True,
                metadata=metadata,
            )

        if metadata.upstream_timestamp <= record.upstream_timestamp:
            logger.info(
                "Cache valid for %s (upstream %s, cached %s)",
                document_id,
                metadata.upstream_timestamp.isoformat(),
                record.cached_at.isoformat(),
            )
            return CacheValidation(
                document_id=document_id,
                valid=True,
                had_record=True,
                metadata=metadata,
                record=record,
            )

        logger.info(
            "Document %s changed upstream (%s > %s), invalidating cache",
            document_id,
            metadata.upstream_timestamp.isoformat(),
            record.upstream_timestamp.isoformat(),
        )
        await self._store.invalidate(document_id)
        return CacheValidation(
            document_id=document_id,
            valid=False,
            was_invalidated=True,
            had_record=True,
            metadata=metadata,
        )

    async def commit(
        self, validation: CacheValidation, now: datetime | None = None
    ) -> CacheRecord:
        """Write a fresh record from the probe that produced ``validation``.

        Called once per document, after all of its artifact work succeeded.
        """
        metadata = validation.metadata
        record = CacheRecord(
            document_id=validation.document_id,
            upstream_timestamp=metadata.upstream_timestamp,
            cached_at=now or datetime.now(timezone.utc),
            version=metadata.version,
            last_editor=metadata.last_editor,
        )
        await self._store.write(validation.document_id, record)
        logger.info("Cache record written for %s", validation.document_id)
        return record
