# src/annotations/associator.py — v1
"""Assign comment threads and freestanding notes to the nearest artifact.

Comments anchored to a node attach directly (to the artifact itself, or to
the artifact whose subtree contains the node). Coordinate-anchored comments
and notes use rectangle distance with a configurable threshold; ties go to
the artifact listed first. Everything else is returned as unassociated.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from designscan.annotations.threads import format_thread, group_comments_into_threads
from designscan.core.geometry import rectangle_distance
from designscan.core.models import Annotation, BoundingBox, NoteMarker, VisualArtifact
from designscan.upstream.base_services import BaseCommentService
from designscan.upstream.models import CommentThread

logger = logging.getLogger(__name__)

DEFAULT_NOTE_MAX_DISTANCE = 500.0


class AssociationStats(BaseModel):
    total_comment_threads: int = 0
    matched_comment_threads: int = 0
    total_notes: int = 0
    matched_notes: int = 0


class AssociationResult(BaseModel):
    """Artifacts with annotations attached, plus what could not be placed."""

    artifacts: list[VisualArtifact] = Field(default_factory=list)
    unassociated_notes: list[Annotation] = Field(default_factory=list)
    unassociated_comments: list[Annotation] = Field(default_factory=list)
    stats: AssociationStats = Field(default_factory=AssociationStats)


# === SPATIAL MATCHING ===


def find_nearest_artifact(
    box: BoundingBox,
    artifacts: list[VisualArtifact],
    max_distance: float = DEFAULT_NOTE_MAX_DISTANCE,
) -> VisualArtifact | None:
    """Nearest artifact within ``max_distance``; first in input order on ties."""
    closest: VisualArtifact | None = None
    closest_distance = float("inf")
    for artifact in artifacts:
        if artifact.bounding_box is None:
            continue
        distance = rectangle_distance(box, artifact.bounding_box)
        if distance < closest_distance:
            closest, closest_distance = artifact, distance
    if closest is None or closest_distance > max_distance:
        return None
    return closest


def associate_notes(
    artifacts: list[VisualArtifact],
    notes: list[NoteMarker],
    max_distance: float = DEFAULT_NOTE_MAX_DISTANCE,
) -> tuple[dict[str, list[NoteMarker]], list[NoteMarker]]:
    """Map artifact id -> matched notes, plus the unmatched notes."""
    matched: dict[str, list[NoteMarker]] = {}
    unmatched: list[NoteMarker] = []
    for note in notes:
        target = None
        if note.bounding_box is not None:
            target = find_nearest_artifact(note.bounding_box, artifacts, max_distance)
        if target is None:
            unmatched.append(note)
            continue
        matched.setdefault(target.artifact_id, []).append(note)
    return matched, unmatched


# === COMMENT ANCHORING ===


def build_node_index(node_trees: dict[str, dict[str, Any]]) -> dict[str, str]:
    """Map every descendant node id to the artifact id owning the subtree."""
    index: dict[str, str] = {}
    for artifact_id, tree in node_trees.items():
        stack = [tree]
        while stack:
            node = stack.pop()
            node_id = node.get("id")
            if node_id and node_id not in index:
                index[node_id] = artifact_id
            stack.extend(node.get("children") or [])
    return index


def associate_comments(
    artifacts: list[VisualArtifact],
    threads: list[CommentThread],
    node_trees: dict[str, dict[str, Any]] | None = None,
    max_distance: float = DEFAULT_NOTE_MAX_DISTANCE,
) -> tuple[dict[str, list[CommentThread]], list[CommentThread]]:
    """Map artifact id -> anchored threads, plus threads with no artifact."""
    artifact_ids = {a.artifact_id for a in artifacts}
    node_index = build_node_index(node_trees or {})

    matched: dict[str, list[CommentThread]] = {}
    unmatched: list[CommentThread] = []
    for thread in threads:
        target_id = _anchor_target(thread, artifacts, artifact_ids, node_index, max_distance)
        if target_id is None:
            unmatched.append(thread)
        else:
            matched.setdefault(target_id, []).append(thread)
    return matched, unmatched


def _anchor_target(
    thread: CommentThread,
    artifacts: list[VisualArtifact],
    artifact_ids: set[str],
    node_index: dict[str, str],
    max_distance: float,
) -> str | None:
    root = thread.root
    if root.anchor_node_id:
        if root.anchor_node_id in artifact_ids:
            return root.anchor_node_id
        owner = node_index.get(root.anchor_node_id)
        if owner in artifact_ids:
            return owner
        return None
    box = root.anchor_box
    if box is not None:
        nearest = find_nearest_artifact(box, artifacts, max_distance)
        return nearest.artifact_id if nearest else None
    return None


# === MERGE ===


def thread_to_annotation(thread: CommentThread) -> Annotation:
    return Annotation(
        kind="comment",
        text_content=format_thread(thread),
        author=thread.root.author,
        source_id=thread.root.id,
        created_at=thread.latest_activity,
    )


def note_to_annotation(note: NoteMarker) -> Annotation:
    return Annotation(kind="note", text_content=note.text, source_id=note.node_id)


def merge_annotations(
    artifacts: list[VisualArtifact],
    threads_by_artifact: dict[str, list[CommentThread]],
    notes_by_artifact: dict[str, list[NoteMarker]],
) -> list[VisualArtifact]:
    """Return artifact copies with comment annotations first, then notes."""
    merged: list[VisualArtifact] = []
    for artifact in artifacts:
        annotations = [
            thread_to_annotation(t) for t in threads_by_artifact.get(artifact.artifact_id, [])
        ]
        annotations.extend(
            note_to_annotation(n) for n in notes_by_artifact.get(artifact.artifact_id, [])
        )
        merged.append(artifact.model_copy(update={"annotations": annotations}))
    return merged


async def associate_annotations(
    document_id: str,
    artifacts: list[VisualArtifact],
    notes: list[NoteMarker],
    comment_service: BaseCommentService,
    node_trees: dict[str, dict[str, Any]] | None = None,
    max_distance: float = DEFAULT_NOTE_MAX_DISTANCE,
) -> AssociationResult:
    """Fetch a document's comments once and attach comments and notes.

    Args:
        document_id: Document whose comments are fetched.
        artifacts: Artifacts of that document.
        notes: Note markers found during expansion.
        comment_service: Comment collaborator (one call per document).
        node_trees: Artifact subtrees, for resolving nested comment anchors.
        max_distance: Spatial matching threshold.
    """
    comments = await comment_service.fetch_comments(document_id)
    threads = group_comments_into_threads(comments)
    logger.info(
        "Grouped %d comments into %d threads", len(comments), len(threads)
    )

    threads_by_artifact, loose_threads = associate_comments(
        artifacts, threads, node_trees, max_distance
    )
    notes_by_artifact, loose_notes = associate_notes(artifacts, notes, max_distance)

    stats = AssociationStats(
        total_comment_threads=len(threads),
        matched_comment_threads=len(threads) - len(loose_threads),
        total_notes=len(notes),
        matched_notes=len(notes) - len(loose_notes),
    )
    logger.info(
        "Associated %d/%d comment threads and %d/%d notes",
        stats.matched_comment_threads, stats.total_comment_threads,
        stats.matched_notes, stats.total_notes,
    )

    return AssociationResult(
        artifacts=merge_annotations(artifacts, threads_by_artifact, notes_by_artifact),
        unassociated_notes=[note_to_annotation(n) for n in loose_notes],
        unassociated_comments=[thread_to_annotation(t) for t in loose_threads],
        stats=stats,
    )


def find_comment_invalidations(
    artifacts: list[VisualArtifact], cached_at: datetime
) -> list[str]:
    """Artifact ids carrying a comment newer than ``cached_at``."""
    invalidated: list[str] = []
    for artifact in artifacts:
        for annotation in artifact.comments:
            if annotation.created_at and annotation.created_at > cached_at:
                logger.info(
                    "Artifact %s has a comment from %s, newer than cache",
                    artifact.artifact_id, annotation.created_at.isoformat(),
                )
                invalidated.append(artifact.artifact_id)
                break
    return invalidated
