# src/upstream/base_services.py — v1
"""Abstract interfaces of the design document service.

Split by concern so a caller may back each one by a different transport.
``FigmaClient`` implements all three.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from designscan.upstream.models import FileMetadata, ImageBatchResult, RawComment


class BaseContentService(ABC):
    """Document metadata and node trees."""

    @abstractmethod
    async def probe_metadata(self, document_id: str) -> FileMetadata:
        """Cheap probe returning the last modification timestamp."""

    @abstractmethod
    async def fetch_nodes(
        self, document_id: str, node_ids: list[str]
    ) -> dict[str, dict[str, Any]]:
        """Fetch node trees for ``node_ids`` in one call.

        Ids the service does not know are absent from the returned dict.
        """


class BaseCommentService(ABC):
    """Comments attached to a document."""

    @abstractmethod
    async def fetch_comments(self, document_id: str) -> list[RawComment]:
        """Fetch every comment of a document in one call."""


class BaseImageService(ABC):
    """Raster rendering of nodes."""

    @abstractmethod
    async def render_images(
        self,
        document_id: str,
        node_ids: list[str],
        fmt: str = "png",
        scale: float = 1.0,
    ) -> ImageBatchResult:
        """Render ``node_ids`` in one batch; unrenderable ids go to ``failed``."""
