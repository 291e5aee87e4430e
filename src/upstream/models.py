# src/upstream/models.py — v1
"""Types exchanged with the design document service.

Raw node trees stay plain ``dict`` objects as returned by the service; only
metadata, comments and rendered images are modelled.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from designscan.core.models import BoundingBox


class FileMetadata(BaseModel):
    """Cheap probe result: the document's last modification state."""

    document_id: str
    upstream_timestamp: datetime
    name: str | None = None
    version: str | None = None
    last_editor: str | None = None


# === COMMENTS ===


class RawComment(BaseModel):
    """One comment as returned by the comment service."""

    id: str
    message: str
    created_at: datetime
    resolved_at: datetime | None = None
    author: str | None = None
    parent_id: str | None = None

    # --- Anchor ---
    anchor_node_id: str | None = None
    anchor_offset: tuple[float, float] | None = None
    anchor_point: tuple[float, float] | None = None

    @property
    def anchor_box(self) -> BoundingBox | None:
        """Zero-size rectangle at the coordinate anchor, if any."""
        if self.anchor_point is None:
            return None
        return BoundingBox(x=self.anchor_point[0], y=self.anchor_point[1])


class CommentThread(BaseModel):
    """A root comment and its replies, oldest reply first."""

    root: RawComment
    replies: list[RawComment] = Field(default_factory=list)

    @property
    def is_resolved(self) -> bool:
        return self.root.resolved_at is not None

    @property
    def latest_activity(self) -> datetime:
        return max([self.root.created_at] + [r.created_at for r in self.replies])


# === IMAGES ===


class RenderedImage(BaseModel):
    """Rendered raster of one artifact."""

    artifact_id: str
    data: bytes
    media_type: str


class ImageBatchResult(BaseModel):
    """Outcome of one batched render; per-artifact failures do not abort."""

    images: dict[str, RenderedImage] = Field(default_factory=dict)
    failed: list[str] = Field(default_factory=list)
