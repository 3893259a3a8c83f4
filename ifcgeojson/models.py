"""Data classes shared by the conversion pipeline."""

import logging
import os
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

import numpy as np

from . import constants

logger = logging.getLogger(__name__)


class Projection(str, Enum):
    axis_drop = "axis-drop"
    pca = "pca"


class RangePolicy(str, Enum):
    wrap = "wrap"
    clamp = "clamp"


class Element(NamedTuple):
    element_id: str
    type_label: str


@dataclass(frozen=True)
class Mesh:
    """Triangulated surface: ``(N, 3)`` float vertices and ``(M, 3)`` int faces.

    Arrays are copied and frozen on construction. Faces are not range
    checked here; out-of-range triangles are rejected by the validator.
    Flat index buffers of arbitrary length go through ``from_index_buffers``.
    """
    vertices: np.ndarray
    faces: np.ndarray

    def __post_init__(self):
        vertices = np.array(self.vertices, dtype=float)
        faces = np.array(self.faces, dtype=np.int64)
        if vertices.size % 3 != 0:
            raise ValueError(f"Vertex buffer of {vertices.size} values is not (N, 3)")
        if faces.size % 3 != 0:
            raise ValueError(f"Face buffer of {faces.size} indices is not (M, 3); "
                             f"use Mesh.from_index_buffers for flat buffers")
        vertices = vertices.reshape(-1, 3)
        faces = faces.reshape(-1, 3)
        vertices.setflags(write=False)
        faces.setflags(write=False)
        object.__setattr__(self, 'vertices', vertices)
        object.__setattr__(self, 'faces', faces)

    @classmethod
    def from_index_buffers(cls, vertices, buffers) -> "Mesh":
        """Build a mesh from flat index buffers read as consecutive triples.

        A buffer whose length is not a multiple of three is skipped; the
        remaining buffers still contribute their triangles.
        """
        triangles = []
        for i, buf in enumerate(buffers):
            indices = np.asarray(buf, dtype=np.int64).ravel()
            if len(indices) % 3 != 0:
                logger.warning(f"Skipping index buffer {i}: length {len(indices)} "
                               f"is not a multiple of 3")
                continue
            triangles.append(indices.reshape(-1, 3))
        faces = np.concatenate(triangles) if triangles else np.empty((0, 3), dtype=np.int64)
        return cls(vertices=vertices, faces=faces)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def face_count(self) -> int:
        return len(self.faces)


@dataclass
class ConversionOptions:
    projection: Projection = Projection.axis_drop
    range_policy: RangePolicy = RangePolicy.clamp
    include_elevation: bool = False
    scale: float = constants.COORDINATE_SCALE
    epsilon: float = constants.EPSILON
    drop_axis: str = 'z'
    rfc7946: bool = False
    workers: int = 1

    def __post_init__(self):
        self.projection = Projection(self.projection)
        self.range_policy = RangePolicy(self.range_policy)
        self.drop_axis = self.drop_axis.lower()
        if self.drop_axis not in constants.AXES:
            raise ValueError(f"Unsupported drop axis: {self.drop_axis}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")

    @classmethod
    def from_env(cls, **overrides) -> "ConversionOptions":
        """Options from ``IFCGEOJSON_*`` environment variables.

        Keyword arguments that are not ``None`` take precedence.
        """
        env = {}
        if os.environ.get(constants.ENV_SCALE):
            env['scale'] = float(os.environ[constants.ENV_SCALE])
        if os.environ.get(constants.ENV_PROJECTION):
            env['projection'] = os.environ[constants.ENV_PROJECTION].strip().lower()
        if os.environ.get(constants.ENV_RANGE_POLICY):
            env['range_policy'] = os.environ[constants.ENV_RANGE_POLICY].strip().lower()
        if os.environ.get(constants.ENV_INCLUDE_ELEVATION):
            env['include_elevation'] = (
                os.environ[constants.ENV_INCLUDE_ELEVATION].strip().lower()
                in ("1", "true", "yes"))
        env.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**env)


@dataclass
class ConversionStats:
    """Diagnostics counters for one conversion run."""
    elements_seen: int = 0
    elements_emitted: int = 0
    elements_empty: int = 0
    elements_failed: int = 0
    triangles_accepted: int = 0
    triangles_rejected: Counter = field(default_factory=Counter)
    rings_discarded: int = 0
    points_dropped: int = 0

    def merge(self, other: "ConversionStats") -> None:
        self.elements_seen += other.elements_seen
        self.elements_emitted += other.elements_emitted
        self.elements_empty += other.elements_empty
        self.elements_failed += other.elements_failed
        self.triangles_accepted += other.triangles_accepted
        self.triangles_rejected.update(other.triangles_rejected)
        self.rings_discarded += other.rings_discarded
        self.points_dropped += other.points_dropped

    def summary(self) -> str:
        rejected = ", ".join(f"{k}={v}" for k, v in sorted(self.triangles_rejected.items()))
        return (f"{self.elements_emitted}/{self.elements_seen} elements emitted "
                f"({self.elements_empty} empty, {self.elements_failed} failed); "
                f"{self.triangles_accepted} triangles accepted, "
                f"rejected: {rejected or 'none'}; "
                f"{self.rings_discarded} rings discarded, "
                f"{self.points_dropped} points dropped")

