"""Cap triangulation for polygon rings.

The prism builder treats triangulation as an external service
described by the :class:`Triangulator` protocol.  The default
:class:`DelaunayTriangulator` covers simple polygons without holes,
convex or concave.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import numpy as np
from matplotlib.path import Path
from scipy.spatial import Delaunay, QhullError

from polyprism._constants import AREA_EPSILON
from polyprism.errors import TriangulationError
from polyprism.geometry import signed_area_2x


class Triangulator(Protocol):
    """Turns a polygon ring into a flat triangulated cap.

    Implementations return ``(vertices, faces)`` where *vertices* has
    shape ``(v, 3)`` with ring point ``(x, y)`` placed at
    ``(x, plane_height, y)``, and *faces* has shape ``(f, 3)`` with each
    triangle wound the same way as *ring*.
    """

    def triangulate(
        self,
        ring: np.ndarray,
        holes: Sequence[np.ndarray],
        plane_height: float,
    ) -> tuple[np.ndarray, np.ndarray]:
        ...


def lift_to_plane(points: np.ndarray, plane_height: float) -> np.ndarray:
    """Map 2D points ``(x, y)`` to 3D points ``(x, plane_height, y)``."""
    points = np.asarray(points, dtype=float)
    lifted = np.empty((len(points), 3))
    lifted[:, 0] = points[:, 0]
    lifted[:, 1] = plane_height
    lifted[:, 2] = points[:, 1]
    return lifted


def _orient_like(points: np.ndarray, simplices: np.ndarray, sign: float) -> np.ndarray:
    """Reorder each triangle so its signed area has the given *sign*."""
    a = points[simplices[:, 0]]
    b = points[simplices[:, 1]]
    c = points[simplices[:, 2]]
    cross = (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
    flip = np.sign(cross) != np.sign(sign)
    oriented = simplices.copy()
    oriented[flip] = oriented[flip][:, [0, 2, 1]]
    return oriented


def _turns(ring: np.ndarray) -> np.ndarray:
    """Cross product of the two edges meeting at each ring vertex."""
    prev = np.roll(ring, 1, axis=0)
    nxt = np.roll(ring, -1, axis=0)
    return (
        (ring[:, 0] - prev[:, 0]) * (nxt[:, 1] - ring[:, 1])
        - (ring[:, 1] - prev[:, 1]) * (nxt[:, 0] - ring[:, 0])
    )


def _cross(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> np.ndarray:
    """Twice the signed area of triangle(s) ``(a, b, c)``."""
    return (b[..., 0] - a[..., 0]) * (c[..., 1] - a[..., 1]) - (
        b[..., 1] - a[..., 1]
    ) * (c[..., 0] - a[..., 0])


def is_convex(ring: np.ndarray) -> bool:
    """Whether no vertex of *ring* turns against the ring's winding.

    Collinear vertices count as convex.
    """
    ring = np.asarray(ring, dtype=float)
    sign = 1.0 if signed_area_2x(ring) >= 0 else -1.0
    return bool(np.all(_turns(ring) * sign >= 0))


def _is_ear(
    ring: np.ndarray,
    remaining: list[int],
    k: int,
    sign: float,
    *,
    strict: bool,
) -> bool:
    m = len(remaining)
    prev, cur, nxt = remaining[k - 1], remaining[k], remaining[(k + 1) % m]
    a, b, c = ring[prev], ring[cur], ring[nxt]
    turn = float(_cross(a, b, c)) * sign
    if turn < 0 or (strict and turn == 0):
        return False
    others = [v for v in remaining if v not in (prev, cur, nxt)]
    if not others:
        return True
    p = ring[others]
    inside = (
        (_cross(a, b, p) * sign >= 0)
        & (_cross(b, c, p) * sign >= 0)
        & (_cross(c, a, p) * sign >= 0)
    )
    return not bool(np.any(inside))


def ear_clip(ring: np.ndarray) -> np.ndarray:
    """Triangulate a simple polygon by clipping ears in ring order.

    Every returned triangle uses ring edges or diagonals lying inside
    the polygon, so the triangles tile the ring exactly.  Triangles are
    wound the same way as *ring*.

    Args:
        ring: Polygon ring, shape ``(n, 2)``.

    Returns:
        Integer array of shape ``(n - 2, 3)`` indexing into *ring*.

    Raises:
        TriangulationError: If no ear can be found, which happens when
            the ring intersects itself.
    """
    ring = np.asarray(ring, dtype=float)
    sign = 1.0 if signed_area_2x(ring) >= 0 else -1.0
    remaining = list(range(len(ring)))
    faces = []
    while len(remaining) > 3:
        for strict in (True, False):
            ear = next(
                (k for k in range(len(remaining))
                 if _is_ear(ring, remaining, k, sign, strict=strict)),
                None,
            )
            if ear is not None:
                break
        else:
            raise TriangulationError(
                f"no ear found with {len(remaining)} vertices left; "
                "the ring may intersect itself"
            )
        m = len(remaining)
        faces.append((remaining[ear - 1], remaining[ear], remaining[(ear + 1) % m]))
        del remaining[ear]
    faces.append(tuple(remaining))
    return np.array(faces, dtype=np.int64)


class DelaunayTriangulator:
    """Default cap triangulator.

    Convex rings use the Delaunay triangulation of their vertices.
    Concave rings are ear-clipped in ring order, which keeps every
    triangle inside the ring.  Either way the triangles must tile the
    ring: a cap whose area differs from the ring's raises
    :class:`~polyprism.errors.TriangulationError`.
    """

    def triangulate(
        self,
        ring: np.ndarray,
        holes: Sequence[np.ndarray] = (),
        plane_height: float = 0.0,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Triangulate *ring* at *plane_height*.

        Args:
            ring: Polygon ring, shape ``(n, 2)``.
            holes: Must be empty.
            plane_height: Height of the cap plane.

        Returns:
            ``(vertices, faces)`` as described by :class:`Triangulator`.
            The vertices are the ring vertices in ring order.

        Raises:
            NotImplementedError: If *holes* is non-empty.
            TriangulationError: If Qhull rejects the ring, or the
                triangles do not tile it (for example a
                self-intersecting ring).
        """
        if len(holes):
            raise NotImplementedError("polygon holes are not supported")
        ring = np.asarray(ring, dtype=float)
        vertices = lift_to_plane(ring, plane_height)
        if len(ring) == 3:
            return vertices, np.array([[0, 1, 2]], dtype=np.int64)

        if is_convex(ring):
            simplices = self._delaunay(ring)
        else:
            simplices = ear_clip(ring)

        faces = _orient_like(ring, simplices, signed_area_2x(ring))
        a, b, c = (ring[faces[:, i]] for i in range(3))
        cap_area = float(np.abs(_cross(a, b, c)).sum()) / 2.0
        ring_area = abs(signed_area_2x(ring)) / 2.0
        if not np.isclose(cap_area, ring_area, rtol=1e-6, atol=AREA_EPSILON):
            raise TriangulationError(
                f"cap area {cap_area:g} does not match ring area {ring_area:g}"
            )
        return vertices, faces

    @staticmethod
    def _delaunay(ring: np.ndarray) -> np.ndarray:
        try:
            tri = Delaunay(ring)
        except QhullError as exc:
            raise TriangulationError(f"Delaunay triangulation failed: {exc}") from exc
        simplices = np.asarray(tri.simplices, dtype=np.int64)
        centres = ring[simplices].mean(axis=1)
        simplices = simplices[Path(ring).contains_points(centres)]
        if len(simplices) == 0:
            raise TriangulationError("no triangles fall inside the ring")
        return simplices
