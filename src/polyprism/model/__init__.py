"""Core data model for polyprism: transforms, meshes, colours and materials.

Everything is re-exported here so that ``from polyprism.model import
Mesh`` works regardless of which submodule defines it.
"""

from polyprism.model.colour import (
    BLACK,
    RGBA8,
    Colour,
    normalise_rgba,
    rgba_from_channels,
    to_unit_rgba,
)
from polyprism.model.material import Material, MaterialLibrary
from polyprism.model.mesh import Mesh, SubMesh, compute_vertex_normals
from polyprism.model.properties import PrismDescriptor, PrismProperties
from polyprism.model.transform import AffineTransform, LocalTransform

__all__ = [
    "AffineTransform",
    "BLACK",
    "Colour",
    "LocalTransform",
    "Material",
    "MaterialLibrary",
    "Mesh",
    "PrismDescriptor",
    "PrismProperties",
    "RGBA8",
    "SubMesh",
    "compute_vertex_normals",
    "normalise_rgba",
    "rgba_from_channels",
    "to_unit_rgba",
]
