"""Shared fixtures for the conversion tests."""

import numpy as np
import pytest

from ifcgeojson.models import Mesh
from ifcgeojson.providers import InMemoryMeshProvider


def triangle_mesh(*corners) -> Mesh:
    """Mesh of a single triangle from three (x, y, z) corners."""
    return Mesh(vertices=np.array(corners, dtype=float), faces=[[0, 1, 2]])


@pytest.fixture
def right_triangle() -> Mesh:
    return triangle_mesh((0, 0, 0), (10, 0, 0), (0, 10, 0))


@pytest.fixture
def two_triangles() -> Mesh:
    """Two disjoint triangles in the XY plane."""
    vertices = [
        (0, 0, 0), (10, 0, 0), (0, 10, 0),
        (100, 100, 0), (110, 100, 0), (100, 110, 0),
    ]
    return Mesh(vertices=vertices, faces=[[0, 1, 2], [3, 4, 5]])


@pytest.fixture
def provider(right_triangle, two_triangles) -> InMemoryMeshProvider:
    p = InMemoryMeshProvider()
    p.add("wall-1", "IfcWall", right_triangle)
    p.add("slab-1", "IfcSlab", two_triangles)
    p.add("proxy-1", "IfcBuildingElementProxy", None)
    return p
