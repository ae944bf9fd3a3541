"""Prism mesh assembly from a polygon ring and an extrusion height.

A prism is built as three parts, combined into one indexed mesh:

- the bottom cap at ``y = 0``, placed mirrored so it faces down,
- the side wall, one quad per ring edge,
- the top cap at ``y = height``, facing up.

Ring point ``(x, y)`` becomes ``(x, h, y)`` in 3D.  With a clockwise
ring and counter-clockwise front faces (normal ``(b - a) x (c - a)``)
every face of the result points out of the solid.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from polyprism._constants import DEFAULT_BOTTOM_Y
from polyprism.construction.triangulation import (
    DelaunayTriangulator,
    Triangulator,
    lift_to_plane,
)
from polyprism.model.mesh import Mesh, SubMesh
from polyprism.model.transform import placement_matrix

#: Placement of the bottom cap: mirror through the origin, then turn
#: half a revolution about the vertical axis.  The net effect is a
#: reflection in the ``y = 0`` plane, which leaves the cap's vertices
#: in place but turns its faces downward.
BOTTOM_PLACEMENT: np.ndarray = placement_matrix(
    scale=(-1.0, -1.0, -1.0), rotation_y=np.pi,
)


@dataclass(frozen=True)
class PrismMesh:
    """A combined prism mesh together with the parts it was built from.

    Attributes:
        mesh: The combined mesh (bottom, side, top, in that order).
        bottom: Bottom cap part.
        side: Side wall part.
        top: Top cap part.
    """

    mesh: Mesh
    bottom: SubMesh
    side: SubMesh
    top: SubMesh


def side_wall_faces(n: int) -> np.ndarray:
    """Triangle indices for the side wall of an *n*-vertex ring.

    The side wall vertex buffer holds the bottom ring (indices
    ``0 .. n-1``) followed by the top ring (``n .. 2n-1``).  Quad ``i``
    joins bottom ``i``/``i+1`` with top ``i``/``i+1``; the last quad
    wraps to bottom ``0`` and top ``n``.

    Returns:
        Integer array of shape ``(2n, 3)``.

    Raises:
        ValueError: If *n* < 3.
    """
    if n < 3:
        raise ValueError(f"side wall needs at least 3 ring vertices, got {n}")
    faces = np.empty((2 * n, 3), dtype=np.int64)
    index_b = 0
    index_t = n
    for i in range(n):
        if i == n - 1:
            # Last quad wraps back to the first vertex of each ring.
            faces[2 * i] = (index_b, 0, index_t)
            faces[2 * i + 1] = (0, n, index_t)
        else:
            faces[2 * i] = (index_b, index_b + 1, index_t)
            faces[2 * i + 1] = (index_b + 1, index_t + 1, index_t)
            index_b += 1
            index_t += 1
    return faces


def build_side_wall(local_ring: np.ndarray, height: float) -> SubMesh:
    """Side wall part: bottom ring then top ring, ``n`` quads."""
    vertices = np.concatenate([
        lift_to_plane(local_ring, DEFAULT_BOTTOM_Y),
        lift_to_plane(local_ring, DEFAULT_BOTTOM_Y + height),
    ])
    return SubMesh(vertices=vertices, faces=side_wall_faces(len(local_ring)))


def build_prism_mesh(
    ring: np.ndarray,
    height: float,
    centroid: np.ndarray,
    *,
    triangulator: Triangulator | None = None,
) -> PrismMesh:
    """Extrude a clockwise polygon ring into a closed prism mesh.

    The mesh is anchored at the footprint centroid: vertices are
    expressed relative to *centroid*, so the prism's local origin sits
    at the centre of its base.

    Args:
        ring: Clockwise polygon ring, shape ``(n, 2)`` with n >= 3.
            See :func:`~polyprism.geometry.normalise_winding`.
        height: Extrusion height.  Zero gives a flat prism with
            coplanar side triangles.
        centroid: Footprint centroid, shape ``(2,)``.
        triangulator: Cap triangulator, defaulting to
            :class:`DelaunayTriangulator`.

    Returns:
        A :class:`PrismMesh`.

    Raises:
        TriangulationError: If a cap cannot be triangulated.
    """
    if triangulator is None:
        triangulator = DelaunayTriangulator()
    ring = np.asarray(ring, dtype=float)
    local_ring = ring - np.asarray(centroid, dtype=float)

    bottom_vertices, bottom_faces = triangulator.triangulate(
        local_ring, [], DEFAULT_BOTTOM_Y,
    )
    bottom = SubMesh(
        vertices=bottom_vertices, faces=bottom_faces, placement=BOTTOM_PLACEMENT,
    )

    top_vertices, top_faces = triangulator.triangulate(
        local_ring, [], DEFAULT_BOTTOM_Y + height,
    )
    top = SubMesh(vertices=top_vertices, faces=top_faces)

    side = build_side_wall(local_ring, height)

    mesh = Mesh.combine([bottom, side, top])
    return PrismMesh(mesh=mesh, bottom=bottom, side=side, top=top)
