"""Ring assembly and coordinate transforms (scale plus range normalisation)."""

import math
import logging
from typing import List, Optional

import numpy as np

from .constants import EPSILON, LAT_MAX, LAT_MIN, LON_MAX, LON_MIN
from .models import ConversionOptions, ConversionStats, Mesh, RangePolicy
from .projection import fit_frame
from .validation import iter_valid_triangles

logger = logging.getLogger(__name__)

Ring = List[List[float]]


# ── Ring building ───────────────────────────────────────────────────────

def _same_point(a, b, eps: float) -> bool:
    """Planar coincidence test; a third (elevation) value is ignored."""
    return abs(a[0] - b[0]) <= eps and abs(a[1] - b[1]) <= eps


def close_ring(points, eps: float = EPSILON) -> Optional[Ring]:
    """Collapse consecutive duplicates and close the ring.

    Returns ``None`` when fewer than three distinct points remain.
    """
    deduped = []
    for pt in points:
        if deduped and _same_point(deduped[-1], pt, eps):
            continue
        deduped.append([float(c) for c in pt])
    while len(deduped) > 1 and _same_point(deduped[0], deduped[-1], eps):
        deduped.pop()
    if len(deduped) < 3:
        return None
    return deduped + [list(deduped[0])]


def build_ring(points, eps: float = EPSILON) -> Optional[Ring]:
    """Closed ring ``[v0, v1, v2, v0]`` from three projected triangle corners."""
    if len(points) != 3:
        raise ValueError(f"Expected 3 triangle corners, got {len(points)}")
    return close_ring(points, eps)


# ── Coordinate transforms ───────────────────────────────────────────────

def wrap_lon(lon: float) -> float:
    return ((lon % 360.0) + 540.0) % 360.0 - 180.0


def wrap_lat(lat: float) -> float:
    return ((lat % 180.0) + 270.0) % 180.0 - 90.0


def clamp_lon(lon: float) -> float:
    return max(LON_MIN, min(LON_MAX, lon))


def clamp_lat(lat: float) -> float:
    return max(LAT_MIN, min(LAT_MAX, lat))


def transform_point(x: float, y: float, scale: float,
                    policy=RangePolicy.clamp) -> Optional[tuple]:
    """Scale a planar point and bring it into lon/lat range.

    Returns ``None`` when the normalised value is not finite. An overflowed
    scaled value is clamped to the boundary; under wrap it becomes NaN.
    """
    lon = x * scale
    lat = y * scale
    # min/max would turn NaN into a boundary value
    if math.isnan(lon) or math.isnan(lat):
        return None

    if RangePolicy(policy) is RangePolicy.wrap:
        lon, lat = wrap_lon(lon), wrap_lat(lat)
    else:
        lon, lat = clamp_lon(lon), clamp_lat(lat)

    if not (math.isfinite(lon) and math.isfinite(lat)):
        return None
    return lon, lat


def transform_ring(ring: Ring, options: ConversionOptions,
                   stats: Optional[ConversionStats] = None) -> Optional[Ring]:
    """Transform every point of *ring*; drop the ring if it degenerates.

    Points with non-finite results are dropped and the remainder is
    re-closed. Elevation, when present, passes through unscaled.
    """
    transformed = []
    for pt in ring:
        result = transform_point(pt[0], pt[1], options.scale, options.range_policy)
        if result is None:
            logger.warning(f"Skipping point with invalid transformed coordinates: "
                           f"({pt[0]}, {pt[1]})")
            if stats is not None:
                stats.points_dropped += 1
            continue
        lon, lat = result
        transformed.append([lon, lat] + [float(c) for c in pt[2:]])

    # Clamping may merge distinct points, so only exact duplicates collapse here
    closed = close_ring(transformed, eps=0.0)
    if closed is None:
        logger.warning("Skipping ring due to insufficient points")
    return closed


# ── Mesh to rings ───────────────────────────────────────────────────────

def rings_from_mesh(mesh: Mesh, options: ConversionOptions,
                    stats: Optional[ConversionStats] = None) -> List[Ring]:
    """Validate, project, close and transform every triangle of *mesh*."""
    if stats is None:
        stats = ConversionStats()
    if mesh.vertex_count == 0 or mesh.face_count == 0:
        return []

    frame = fit_frame(mesh.vertices, options.projection, options.drop_axis)
    rings = []
    for face, corners in iter_valid_triangles(mesh, options.epsilon, stats):
        planar = frame.project(corners)
        if options.include_elevation:
            planar = np.column_stack([planar, corners[:, 2]])

        ring = build_ring(planar.tolist(), options.epsilon)
        if ring is None:
            logger.debug(f"Skipping triangle {face.tolist()}: "
                         f"fewer than 3 distinct projected points")
            stats.rings_discarded += 1
            continue

        ring = transform_ring(ring, options, stats)
        if ring is None:
            stats.rings_discarded += 1
            continue
        rings.append(ring)
    return rings
