# src/core/geometry.py — v1
"""Rectangle distance and reading-order helpers.

Pure functions, no I/O.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from designscan.core.models import BoundingBox, VisualArtifact

DEFAULT_ROW_TOLERANCE = 50.0


def rectangle_distance(a: BoundingBox, b: BoundingBox) -> float:
    """Edge-to-edge distance between two axis-aligned rectangles.

    Returns 0.0 when the rectangles overlap or touch on both axes, otherwise
    the Euclidean length of the (horizontal gap, vertical gap) vector.
    """
    gap_x = max(0.0, b.x - a.right, a.x - b.right)
    gap_y = max(0.0, b.y - a.bottom, a.y - b.bottom)
    if gap_x == 0.0 and gap_y == 0.0:
        return 0.0
    return math.hypot(gap_x, gap_y)


def assign_reading_order(
    artifacts: list[VisualArtifact],
    row_tolerance: float = DEFAULT_ROW_TOLERANCE,
) -> list[VisualArtifact]:
    """Return copies of ``artifacts`` with ``order_index`` set (1-based).

    Rows are formed top to bottom: an artifact joins the current row when its
    top edge is within ``row_tolerance`` of the row's first artifact. Inside a
    row artifacts are ordered left to right. Artifacts without a bounding box
    keep their input order after all positioned ones.
    """
    positioned = [a for a in artifacts if a.bounding_box is not None]
    unpositioned = [a for a in artifacts if a.bounding_box is None]

    by_top = sorted(positioned, key=lambda a: (a.bounding_box.y, a.bounding_box.x))
    rows: list[list[VisualArtifact]] = []
    row_top = 0.0
    for artifact in by_top:
        top = artifact.bounding_box.y
        if rows and top - row_top <= row_tolerance:
            rows[-1].append(artifact)
        else:
            rows.append([artifact])
            row_top = top

    ordered: list[VisualArtifact] = []
    for row in rows:
        ordered.extend(sorted(row, key=lambda a: a.bounding_box.x))
    ordered.extend(unpositioned)

    return [
        artifact.model_copy(update={"order_index": index})
        for index, artifact in enumerate(ordered, start=1)
    ]


def format_position(artifact: VisualArtifact, total: int) -> str:
    """Human readable position such as ``"3 of 7"``."""
    return f"{artifact.order_index or 0} of {total}"
