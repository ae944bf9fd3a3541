"""Prism construction: cap triangulation and mesh assembly."""

from polyprism.construction.prism_builder import (
    PrismMesh,
    build_prism_mesh,
    side_wall_faces,
)
from polyprism.construction.triangulation import DelaunayTriangulator, Triangulator

__all__ = [
    "DelaunayTriangulator",
    "PrismMesh",
    "Triangulator",
    "build_prism_mesh",
    "side_wall_faces",
]
