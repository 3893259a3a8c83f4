"""Triangle validation: range, finiteness and degeneracy checks."""

import logging
from typing import Iterator, Optional, Tuple

import numpy as np

from .constants import EPSILON
from .models import ConversionStats, Mesh

logger = logging.getLogger(__name__)

OUT_OF_RANGE = 'out_of_range'
NON_FINITE = 'non_finite'
DEGENERATE = 'degenerate'


def rejection_reason(vertices: np.ndarray, face, eps: float = EPSILON) -> Optional[str]:
    """Return why *face* is unusable, or ``None`` when it is a valid triangle."""
    n = len(vertices)
    if any(idx < 0 or idx >= n for idx in face):
        return OUT_OF_RANGE

    pts = vertices[list(face)]
    if not np.isfinite(pts).all():
        return NON_FINITE

    # Any two coincident corners collapse the triangle to a segment or point
    for a, b in ((0, 1), (1, 2), (0, 2)):
        if np.all(np.abs(pts[a] - pts[b]) <= eps):
            return DEGENERATE
    return None


def validate_triangle(vertices: np.ndarray, face, eps: float = EPSILON) -> Optional[np.ndarray]:
    """Return the ``(3, 3)`` corner array of *face*, or ``None`` if rejected."""
    if rejection_reason(vertices, face, eps) is not None:
        return None
    return vertices[list(face)]


def iter_valid_triangles(mesh: Mesh, eps: float = EPSILON,
                         stats: Optional[ConversionStats] = None
                         ) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
    """Yield ``(face, corners)`` for every accepted triangle of *mesh*.

    Rejected triangles are skipped and counted on *stats* by reason.
    """
    vertices = mesh.vertices
    for face in mesh.faces:
        reason = rejection_reason(vertices, face, eps)
        if reason is not None:
            logger.debug(f"Skipping triangle {tuple(int(i) for i in face)}: {reason}")
            if stats is not None:
                stats.triangles_rejected[reason] += 1
            continue
        if stats is not None:
            stats.triangles_accepted += 1
        yield face, vertices[face]
