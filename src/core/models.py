# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


# === REFERENCES ===


class DocumentReference(BaseModel):
    """A (document, node) pair parsed from a raw reference string."""

    document_id: str
    node_id: str
    url: str | None = None


# === GEOMETRY ===


class BoundingBox(BaseModel):
    """Axis-aligned rectangle in document coordinates."""

    x: float
    y: float
    width: float = 0.0
    height: float = 0.0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> BoundingBox | None:
        """Build from a raw node's ``absoluteBoundingBox`` (None if absent)."""
        box = node.get("absoluteBoundingBox")
        if not box:
            return None
        try:
            return cls(
                x=box["x"], y=box["y"],
                width=box.get("width", 0.0), height=box.get("height", 0.0),
            )
        except (KeyError, TypeError):
            return None


# === ANNOTATIONS ===


class Annotation(BaseModel):
    """A comment thread or sticky note attached to (at most) one artifact."""

    kind: Literal["note", "comment"]
    text_content: str
    author: str | None = None
    source_id: str | None = None
    created_at: datetime | None = None


class NoteMarker(BaseModel):
    """Freestanding note found next to artifacts during expansion."""

    node_id: str
    name: str = "Note"
    text: str
    bounding_box: BoundingBox | None = None


# === ARTIFACTS ===


class AnalysisResult(BaseModel):
    """Generated analysis for one artifact."""

    analysis_text: str
    cached: bool = False


class VisualArtifact(BaseModel):
    """Single analyzable visual unit (one screen/frame) within a document."""

    # --- Identity ---
    document_id: str
    artifact_id: str
    display_name: str
    filename_slug: str
    url: str | None = None

    # --- Organizational context ---
    container_name: str | None = None
    container_id: str | None = None

    # --- Spatial ---
    bounding_box: BoundingBox | None = None
    order_index: int | None = None

    # --- Enrichment ---
    annotations: list[Annotation] = Field(default_factory=list)
    analysis: AnalysisResult | None = None

    @property
    def key(self) -> tuple[str, str]:
        """Uniqueness key across documents."""
        return (self.document_id, self.artifact_id)

    @property
    def comments(self) -> list[Annotation]:
        return [a for a in self.annotations if a.kind == "comment"]

    @property
    def notes(self) -> list[Annotation]:
        return [a for a in self.annotations if a.kind == "note"]


class ExpandedNodes(BaseModel):
    """Result of expanding requested nodes into leaf artifacts and notes."""

    artifacts: list[VisualArtifact] = Field(default_factory=list)
    notes: list[NoteMarker] = Field(default_factory=list)
    node_trees: dict[str, dict[str, Any]] = Field(default_factory=dict)
