# src/pipeline/state.py — v1
"""Workflow phases, concurrency mode and the run result.

``WorkflowResult`` accumulates per-document outcomes as the orchestrator
moves through its phases.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from designscan.core.models import Annotation, VisualArtifact


class WorkflowPhase(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    VALIDATING = "validating"
    FETCHING = "fetching"
    ANALYZING = "analyzing"
    DONE = "done"


class ConcurrencyMode(str, Enum):
    """How artifacts of one run are dispatched to the text generator."""

    PARALLEL = "parallel"
    SEQUENTIAL = "sequential"

    @classmethod
    def for_generator(cls, generator: Any) -> ConcurrencyMode:
        """Resolve from the generator's ``supports_parallel_requests`` flag."""
        if getattr(generator, "supports_parallel_requests", False):
            return cls.PARALLEL
        return cls.SEQUENTIAL


class DocumentOutcome(BaseModel):
    """Cache and fetch bookkeeping for one document of a run."""

    document_id: str
    cache_valid: bool = False
    was_invalidated: bool = False
    upstream_timestamp: datetime | None = None
    missing_node_ids: list[str] = Field(default_factory=list)
    image_failures: list[str] = Field(default_factory=list)
    comment_invalidations: list[str] = Field(default_factory=list)
    stats: dict[str, Any] = Field(default_factory=dict)


class WorkflowResult(BaseModel):
    """Everything a run produced."""

    run_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    mode: ConcurrencyMode | None = None

    artifacts: list[VisualArtifact] = Field(default_factory=list)
    unassociated_notes: list[Annotation] = Field(default_factory=list)
    unassociated_comments: list[Annotation] = Field(default_factory=list)
    documents: dict[str, DocumentOutcome] = Field(default_factory=dict)

    @property
    def analyzed_count(self) -> int:
        """Artifacts analyzed in this run (not served from cache)."""
        return sum(
            1 for a in self.artifacts if a.analysis is not None and not a.analysis.cached
        )

    @property
    def cached_count(self) -> int:
        return sum(1 for a in self.artifacts if a.analysis is not None and a.analysis.cached)

    @property
    def annotation_count(self) -> int:
        return sum(len(a.annotations) for a in self.artifacts)
