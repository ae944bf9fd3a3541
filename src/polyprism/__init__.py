"""polyprism: extrude 2D polygon rings into live, updatable 3D prism meshes.

Polygons arrive as integer grid points, are converted to world
coordinates, normalised to clockwise winding, and extruded into closed
prism meshes anchored at their footprint centroid.  A registry keeps
many prisms up to date as their source polygons change.

Example usage::

    from polyprism import AffineTransform, CoordinateConverter, PrismRegistry

    converter = CoordinateConverter(AffineTransform(precision=100))
    registry = PrismRegistry(converter)
    prism = registry.create("block", [0, 0, 100, 0, 100, 100, 0, 100])
    prism.mesh.vertices, prism.mesh.faces
"""

from polyprism.config import ExtrusionConfig, load_config, save_config
from polyprism.construction import (
    DelaunayTriangulator,
    PrismMesh,
    Triangulator,
    build_prism_mesh,
)
from polyprism.conversion import CoordinateConverter
from polyprism.entity import PrismEntity
from polyprism.errors import (
    DegeneratePolygonError,
    InvalidRingError,
    MissingAssetError,
    PrismError,
    TriangulationError,
)
from polyprism.geometry import (
    analyse_ring,
    centroid,
    is_clockwise,
    normalise_winding,
    polygon_area,
    signed_area_2x,
)
from polyprism.model import (
    AffineTransform,
    LocalTransform,
    Material,
    MaterialLibrary,
    Mesh,
    PrismDescriptor,
    PrismProperties,
    normalise_rgba,
)
from polyprism.registry import BatchResult, PrismRegistry, PrismRequest

__all__ = [
    "AffineTransform",
    "BatchResult",
    "CoordinateConverter",
    "DegeneratePolygonError",
    "DelaunayTriangulator",
    "ExtrusionConfig",
    "InvalidRingError",
    "LocalTransform",
    "Material",
    "MaterialLibrary",
    "Mesh",
    "MissingAssetError",
    "PrismDescriptor",
    "PrismEntity",
    "PrismError",
    "PrismMesh",
    "PrismProperties",
    "PrismRegistry",
    "PrismRequest",
    "TriangulationError",
    "Triangulator",
    "analyse_ring",
    "build_prism_mesh",
    "centroid",
    "is_clockwise",
    "load_config",
    "normalise_rgba",
    "normalise_winding",
    "polygon_area",
    "save_config",
    "signed_area_2x",
]
