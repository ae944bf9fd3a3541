from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from polyprism.model.transform import apply_matrix


def compute_vertex_normals(vertices: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """Per-vertex normals from area-weighted face normals.

    Each face contributes its unnormalised cross product to its three
    corners, so larger faces dominate.  Vertices touched only by
    zero-area faces get a zero normal.

    Args:
        vertices: Array of shape ``(n_vertices, 3)``.
        faces: Integer array of shape ``(n_faces, 3)``.

    Returns:
        Array of shape ``(n_vertices, 3)`` of unit (or zero) vectors.
    """
    normals = np.zeros_like(vertices, dtype=float)
    if len(faces) == 0:
        return normals
    v0 = vertices[faces[:, 0]]
    v1 = vertices[faces[:, 1]]
    v2 = vertices[faces[:, 2]]
    face_normals = np.cross(v1 - v0, v2 - v0)
    for corner in range(3):
        np.add.at(normals, faces[:, corner], face_normals)
    norms = np.linalg.norm(normals, axis=1, keepdims=True)
    return np.where(norms > 1e-12, normals / np.maximum(norms, 1e-12), 0.0)


def compute_face_normals(vertices: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """Unit face normals, ``(b - a) x (c - a)`` normalised, shape ``(n_faces, 3)``."""
    v0 = vertices[faces[:, 0]]
    v1 = vertices[faces[:, 1]]
    v2 = vertices[faces[:, 2]]
    normals = np.cross(v1 - v0, v2 - v0)
    norms = np.linalg.norm(normals, axis=1, keepdims=True)
    return normals / np.maximum(norms, 1e-12)


@dataclass(frozen=True)
class SubMesh:
    """One part of a prism (a cap or the side wall) before combination.

    Attributes:
        vertices: Local vertex positions, shape ``(n, 3)``.
        faces: Triangle indices into *vertices*, shape ``(m, 3)``.
        placement: 4x4 matrix positioning this part within the
            combined mesh.
    """

    vertices: np.ndarray
    faces: np.ndarray
    placement: np.ndarray = field(default_factory=lambda: np.eye(4))

    def __post_init__(self) -> None:
        object.__setattr__(self, "vertices", np.asarray(self.vertices, dtype=float).reshape(-1, 3))
        object.__setattr__(self, "faces", np.asarray(self.faces, dtype=np.int64).reshape(-1, 3))
        object.__setattr__(self, "placement", np.asarray(self.placement, dtype=float))
        if self.placement.shape != (4, 4):
            raise ValueError(
                f"placement must have shape (4, 4), got {self.placement.shape}"
            )

    @property
    def mirrored(self) -> bool:
        """Whether the placement reverses orientation (negative determinant)."""
        return bool(np.linalg.det(self.placement[:3, :3]) < 0)

    def baked(self) -> tuple[np.ndarray, np.ndarray]:
        """Return ``(vertices, faces)`` with the placement applied.

        A mirroring placement turns every triangle inside out, so the
        vertex order of each face is reversed to keep faces
        counter-clockwise when seen from the side they now face.
        """
        vertices = apply_matrix(self.placement, self.vertices)
        faces = self.faces[:, ::-1] if self.mirrored else self.faces
        return vertices, np.ascontiguousarray(faces)


@dataclass(frozen=True)
class Mesh:
    """An indexed triangle mesh with derived normals and bounds.

    Normals and bounds are computed once at construction; a mesh is
    never modified afterwards, so replacing an entity's mesh is a
    single reference swap.

    Attributes:
        vertices: Vertex positions, shape ``(n_vertices, 3)``.
        faces: Triangle vertex indices, shape ``(n_faces, 3)``.
        normals: Per-vertex unit normals, shape ``(n_vertices, 3)``.
        bounds: Axis-aligned bounding box ``[min, max]``, shape
            ``(2, 3)``.

    Raises:
        ValueError: If the arrays have the wrong shape or a face
            refers to a vertex that does not exist.
    """

    vertices: np.ndarray
    faces: np.ndarray
    normals: np.ndarray = field(init=False, repr=False)
    bounds: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        vertices = np.array(self.vertices, dtype=float)
        faces = np.array(self.faces, dtype=np.int64)
        if vertices.ndim != 2 or vertices.shape[1] != 3:
            raise ValueError(
                f"vertices must have shape (n_vertices, 3), got {vertices.shape}"
            )
        if faces.size == 0:
            faces = faces.reshape(0, 3)
        if faces.ndim != 2 or faces.shape[1] != 3:
            raise ValueError(
                f"faces must have shape (n_faces, 3), got {faces.shape}"
            )
        if len(faces) and (faces.min() < 0 or faces.max() >= len(vertices)):
            raise ValueError(
                f"face indices must be in [0, {len(vertices)}), got range "
                f"[{faces.min()}, {faces.max()}]"
            )
        vertices.setflags(write=False)
        faces.setflags(write=False)
        object.__setattr__(self, "vertices", vertices)
        object.__setattr__(self, "faces", faces)

        normals = compute_vertex_normals(vertices, faces)
        normals.setflags(write=False)
        object.__setattr__(self, "normals", normals)

        if len(vertices):
            bounds = np.array([vertices.min(axis=0), vertices.max(axis=0)])
        else:
            bounds = np.zeros((2, 3))
        bounds.setflags(write=False)
        object.__setattr__(self, "bounds", bounds)

    @property
    def n_vertices(self) -> int:
        return len(self.vertices)

    @property
    def n_faces(self) -> int:
        return len(self.faces)

    def face_normals(self) -> np.ndarray:
        """Unit normal of every face, shape ``(n_faces, 3)``."""
        return compute_face_normals(self.vertices, self.faces)

    @classmethod
    def combine(cls, parts: Sequence[SubMesh]) -> Mesh:
        """Concatenate sub-meshes into one mesh with global indices.

        Each part's placement is baked into its vertices, and its face
        indices are offset by the number of vertices appended before it.

        Args:
            parts: Sub-meshes in the order their vertices should appear.

        Returns:
            The combined :class:`Mesh`.
        """
        all_vertices: list[np.ndarray] = []
        all_faces: list[np.ndarray] = []
        offset = 0
        for part in parts:
            vertices, faces = part.baked()
            all_vertices.append(vertices)
            all_faces.append(faces + offset)
            offset += len(vertices)
        if not all_vertices:
            return cls(vertices=np.empty((0, 3)), faces=np.empty((0, 3), dtype=np.int64))
        return cls(
            vertices=np.concatenate(all_vertices),
            faces=np.concatenate(all_faces),
        )
