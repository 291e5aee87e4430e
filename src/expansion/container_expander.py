# src/expansion/container_expander.py — v1
"""Expand requested nodes into a flat list of leaf artifacts and note markers.

Node categories (Figma node ``type``):
    FRAME             leaf artifact
    CANVAS            page: first-level frames and notes
    SECTION           section: first-level frames and notes, tagged with the
                      section's name/id as container
    INSTANCE "Note"   freestanding note marker
Expansion is first-level only; nested sections inside a page are skipped.
"""

from __future__ import annotations

import logging
from typing import Any

from designscan.core.models import (
    BoundingBox,
    ExpandedNodes,
    NoteMarker,
    VisualArtifact,
)
from designscan.core.naming import filename_slug
from designscan.references.resolver import build_node_url

logger = logging.getLogger(__name__)

LEAF_TYPE = "FRAME"
PAGE_TYPE = "CANVAS"
SECTION_TYPE = "SECTION"
NOTE_TYPE = "INSTANCE"
NOTE_NAME = "Note"


def is_note_marker(node: dict[str, Any]) -> bool:
    return node.get("type") == NOTE_TYPE and node.get("name") == NOTE_NAME


def expand_node(
    node: dict[str, Any] | None,
    requested_id: str,
    document_id: str = "",
) -> ExpandedNodes:
    """Expand one fetched node. Unknown categories yield an empty result."""
    if not node:
        logger.warning("Node %s has no data", requested_id)
        return ExpandedNodes()

    node_type = node.get("type")
    if node_type == LEAF_TYPE:
        artifact = _to_artifact(node, document_id)
        return ExpandedNodes(
            artifacts=[artifact], node_trees={artifact.artifact_id: node}
        )

    if node_type == PAGE_TYPE:
        return _expand_children(node, document_id, container=None)

    if node_type == SECTION_TYPE:
        container = (node.get("name") or "Unnamed Section", node.get("id", requested_id))
        return _expand_children(node, document_id, container=container)

    if is_note_marker(node):
        return ExpandedNodes(notes=[to_note_marker(node)])

    logger.info(
        "Node %s of type %s is not expandable, returning empty",
        requested_id, node_type,
    )
    return ExpandedNodes()


def expand_nodes(
    nodes_by_id: dict[str, dict[str, Any]],
    document_id: str,
    requested_ids: list[str] | None = None,
) -> ExpandedNodes:
    """Expand every requested node, deduplicating artifacts and notes by id.

    Args:
        nodes_by_id: Fetched node trees keyed by requested node id.
        document_id: Owning document.
        requested_ids: Expansion order (defaults to ``nodes_by_id`` order).
    """
    merged = ExpandedNodes()
    seen_artifacts: set[str] = set()
    seen_notes: set[str] = set()

    for node_id in requested_ids or list(nodes_by_id):
        expanded = expand_node(nodes_by_id.get(node_id), node_id, document_id)

        for artifact in expanded.artifacts:
            if artifact.artifact_id in seen_artifacts:
                continue
            seen_artifacts.add(artifact.artifact_id)
            merged.artifacts.append(artifact)
            merged.node_trees[artifact.artifact_id] = expanded.node_trees[
                artifact.artifact_id
            ]

        for note in expanded.notes:
            if note.node_id in seen_notes:
                continue
            seen_notes.add(note.node_id)
            merged.notes.append(note)

    logger.info(
        "Expansion complete: %d artifacts, %d notes",
        len(merged.artifacts), len(merged.notes),
    )
    return merged


def to_note_marker(node: dict[str, Any]) -> NoteMarker:
    return NoteMarker(
        node_id=node["id"],
        name=node.get("name", NOTE_NAME),
        text=extract_note_text(node),
        bounding_box=BoundingBox.from_node(node),
    )


def extract_note_text(node: dict[str, Any]) -> str:
    """Characters of the first TEXT descendant (depth first), else the node name."""
    text = _first_text(node)
    if text:
        return text
    return node.get("name", "")


def _first_text(node: dict[str, Any]) -> str | None:
    if node.get("type") == "TEXT" and node.get("characters"):
        return node["characters"]
    for child in node.get("children") or []:
        found = _first_text(child)
        if found:
            return found
    return None


def _expand_children(
    node: dict[str, Any],
    document_id: str,
    container: tuple[str, str] | None,
) -> ExpandedNodes:
    result = ExpandedNodes()
    for child in node.get("children") or []:
        child_type = child.get("type")
        if child_type == LEAF_TYPE:
            artifact = _to_artifact(child, document_id, container)
            result.artifacts.append(artifact)
            result.node_trees[artifact.artifact_id] = child
        elif is_note_marker(child):
            result.notes.append(to_note_marker(child))
        elif child_type == SECTION_TYPE:
            logger.debug("Skipping nested section %s", child.get("id"))

    logger.debug(
        "Expanded %s %s to %d artifacts, %d notes",
        node.get("type"), node.get("id"), len(result.artifacts), len(result.notes),
    )
    return result


def _to_artifact(
    node: dict[str, Any],
    document_id: str,
    container: tuple[str, str] | None = None,
) -> VisualArtifact:
    name = node.get("name") or "Unnamed"
    return VisualArtifact(
        document_id=document_id,
        artifact_id=node["id"],
        display_name=name,
        filename_slug=filename_slug(name, node["id"]),
        url=build_node_url(document_id, node["id"]),
        container_name=container[0] if container else None,
        container_id=container[1] if container else None,
        bounding_box=BoundingBox.from_node(node),
    )
