"""Planar projection of mesh vertices: axis-drop or best-fit plane (PCA).

A ``PlanarFrame`` is fitted once per mesh and then applied to every accepted
triangle of that mesh, so all rings of one shape share a coordinate frame.

The best-fit plane is spanned by the two dominant eigenvectors of the
covariance matrix of the centred vertices. Both are found by power iteration
with a fixed iteration count; the second one on the covariance matrix
deflated by the first eigenpair. Eigenvectors are only defined up to sign,
so each is flipped to make its largest-magnitude component positive.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .constants import AXES, POWER_ITERATIONS
from .models import Projection

logger = logging.getLogger(__name__)

# Several fixed start vectors, so that one lying in the null space of the
# matrix (e.g. the plane normal) cannot stall the iteration.
_START_VECTORS = np.vstack([
    np.eye(3),
    np.ones((1, 3)) / np.sqrt(3.0),
])
_TINY = 1e-300


@dataclass(frozen=True)
class PlanarFrame:
    origin: np.ndarray
    axes: np.ndarray                        # (2, 3) orthonormal rows
    keep: Optional[Tuple[int, int]] = None  # set for axis-drop frames

    def project(self, points) -> np.ndarray:
        """Map ``(K, 3)`` points to ``(K, 2)`` plane coordinates."""
        pts = np.asarray(points, dtype=float).reshape(-1, 3)
        if self.keep is not None:
            return pts[:, list(self.keep)]
        return (pts - self.origin) @ self.axes.T


def axis_drop_frame(drop_axis: str = 'z') -> PlanarFrame:
    """Frame that discards one coordinate and keeps the other two in order."""
    dropped = AXES[drop_axis.lower()]
    keep = tuple(i for i in range(3) if i != dropped)
    return PlanarFrame(origin=np.zeros(3), axes=np.eye(3)[list(keep)], keep=keep)


def canonical_sign(vec: np.ndarray) -> np.ndarray:
    """Flip *vec* so that its largest-magnitude component is positive."""
    if vec[int(np.argmax(np.abs(vec)))] < 0:
        return -vec
    return vec


def power_iteration(matrix: np.ndarray, iterations: int = POWER_ITERATIONS,
                    orthogonal_to: Optional[np.ndarray] = None,
                    tol: float = _TINY) -> Tuple[np.ndarray, float]:
    """Dominant unit eigenvector of a symmetric 3x3 *matrix* and its eigenvalue.

    With *orthogonal_to* the iterate is kept orthogonal to that unit vector.
    Iteration stops early once the image of the iterate is shorter than
    *tol*, leaving the current vector in place.
    Every start vector is iterated and the one with the largest Rayleigh
    quotient wins.
    """
    best_vec, best_val = None, -np.inf
    for start in _START_VECTORS:
        v = start.copy()
        if orthogonal_to is not None:
            v = v - (v @ orthogonal_to) * orthogonal_to
        norm = np.linalg.norm(v)
        if norm < 1e-12:
            continue
        v = v / norm
        for _ in range(iterations):
            w = matrix @ v
            if orthogonal_to is not None:
                w = w - (w @ orthogonal_to) * orthogonal_to
            norm = np.linalg.norm(w)
            if norm < tol:
                break
            v = w / norm
        val = float(v @ matrix @ v)
        if val > best_val:
            best_vec, best_val = v, val
    return best_vec, best_val


def best_fit_frame(vertices, iterations: int = POWER_ITERATIONS) -> PlanarFrame:
    """Fit the PCA plane through the finite rows of *vertices*."""
    pts = np.asarray(vertices, dtype=float).reshape(-1, 3)
    pts = pts[np.isfinite(pts).all(axis=1)]
    if len(pts) == 0:
        logger.debug("No finite vertices, using the XY plane")
        return PlanarFrame(origin=np.zeros(3), axes=np.eye(3)[:2])

    centroid = pts.mean(axis=0)
    centred = pts - centroid
    cov = centred.T @ centred / len(pts)

    # Anything below this is rounding noise of the covariance
    tol = 1e-12 * max(float(np.trace(cov)), _TINY)
    v1, lam1 = power_iteration(cov, iterations, tol=tol)
    v1 = canonical_sign(v1)
    deflated = cov - lam1 * np.outer(v1, v1)
    v2, lam2 = power_iteration(deflated, iterations, orthogonal_to=v1, tol=tol)
    v2 = canonical_sign(v2)

    logger.debug(f"Best-fit plane: centroid={centroid.round(6).tolist()}, "
                 f"eigenvalues=({lam1:.6g}, {lam2:.6g})")
    return PlanarFrame(origin=centroid, axes=np.vstack([v1, v2]))


def fit_frame(vertices, projection=Projection.axis_drop, drop_axis: str = 'z',
              iterations: int = POWER_ITERATIONS) -> PlanarFrame:
    """Frame for one mesh according to the configured projection strategy."""
    if Projection(projection) is Projection.pca:
        return best_fit_frame(vertices, iterations)
    return axis_drop_frame(drop_axis)
