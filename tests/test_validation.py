"""Tests for triangle validation."""

import math

import numpy as np

from ifcgeojson.models import ConversionStats, Mesh
from ifcgeojson.validation import (
    DEGENERATE,
    NON_FINITE,
    OUT_OF_RANGE,
    iter_valid_triangles,
    rejection_reason,
    validate_triangle,
)

VERTS = np.array([
    (0.0, 0.0, 0.0),
    (1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (math.nan, 0.0, 0.0),
    (0.0, math.inf, 0.0),
    (0.0, 0.0, 0.0),
])


def test_valid_triangle_returns_its_corners() -> None:
    corners = validate_triangle(VERTS, (0, 1, 2))
    assert corners is not None
    assert corners.shape == (3, 3)
    assert corners[1].tolist() == [1.0, 0.0, 0.0]


def test_out_of_range_indices_are_rejected() -> None:
    assert rejection_reason(VERTS, (0, 1, 6)) == OUT_OF_RANGE
    assert rejection_reason(VERTS, (-1, 1, 2)) == OUT_OF_RANGE


def test_non_finite_coordinates_are_rejected() -> None:
    assert rejection_reason(VERTS, (3, 1, 2)) == NON_FINITE
    assert rejection_reason(VERTS, (0, 4, 2)) == NON_FINITE
    assert validate_triangle(VERTS, (3, 1, 2)) is None


def test_coincident_vertices_are_degenerate() -> None:
    """Vertex 5 duplicates vertex 0; tiny offsets within epsilon also count."""
    assert rejection_reason(VERTS, (0, 5, 1)) == DEGENERATE
    assert rejection_reason(VERTS, (0, 0, 0)) == DEGENERATE

    near = np.array([(0.0, 0.0, 0.0), (1e-12, 0.0, 0.0), (0.0, 1.0, 0.0)])
    assert rejection_reason(near, (0, 1, 2)) == DEGENERATE


def test_iter_valid_triangles_counts_rejections() -> None:
    mesh = Mesh(vertices=VERTS, faces=[(0, 1, 2), (3, 1, 2), (0, 1, 9), (0, 5, 2)])
    stats = ConversionStats()
    accepted = list(iter_valid_triangles(mesh, stats=stats))

    assert len(accepted) == 1
    assert accepted[0][0].tolist() == [0, 1, 2]
    assert stats.triangles_accepted == 1
    assert stats.triangles_rejected == {NON_FINITE: 1, OUT_OF_RANGE: 1, DEGENERATE: 1}
