"""A single live prism: footprint state, mesh, placement and material."""

from __future__ import annotations

import logging

import numpy as np

from polyprism._constants import UNIT_TOP_Y
from polyprism.construction.prism_builder import PrismMesh, build_prism_mesh
from polyprism.construction.triangulation import Triangulator
from polyprism.errors import MissingAssetError
from polyprism.geometry import analyse_ring
from polyprism.model.colour import BLACK, RGBA8, Colour, normalise_rgba
from polyprism.model.material import Material, MaterialLibrary
from polyprism.model.mesh import Mesh
from polyprism.model.properties import PrismDescriptor
from polyprism.model.transform import LocalTransform

logger = logging.getLogger(__name__)


def _check_height(height: float) -> float:
    height = float(height)
    if not np.isfinite(height) or height < 0:
        raise ValueError(f"height must be finite and non-negative, got {height}")
    return height


def _resolve_material(
    name: str,
    material: str | Material | None,
    materials: MaterialLibrary,
) -> Material:
    """Pick the material a new prism is drawn with.

    A :class:`Material` instance is used as given (and becomes shared);
    a name is acquired from the library; anything unresolvable falls
    back to a fresh per-prism material.
    """
    if isinstance(material, Material):
        material.users += 1
        return material
    if material:
        try:
            return materials.acquire(material)
        except MissingAssetError:
            logger.warning(
                "Material %r not found for prism %r; using fallback shader %r",
                material, name, materials.fallback_shader,
            )
    return materials.fallback()


class PrismEntity:
    """One extruded polygon kept in sync with its source ring.

    The mesh is authored at unit height around the footprint centroid.
    :attr:`transform` places it at ``(centroid_x, base_offset,
    centroid_y)`` and stretches it vertically by the prism height, so a
    height change never touches the geometry.

    Use :meth:`create` rather than the constructor.
    """

    def __init__(
        self,
        descriptor: PrismDescriptor,
        prism_mesh: PrismMesh,
        transform: LocalTransform,
        *,
        triangulator: Triangulator | None,
        materials: MaterialLibrary,
        requested_material: str | Material | None = None,
    ) -> None:
        self._descriptor = descriptor
        self._prism_mesh = prism_mesh
        self._transform = transform
        self._triangulator = triangulator
        self._materials = materials
        self._requested_material = requested_material

    @classmethod
    def create(
        cls,
        name: str,
        height: float,
        ring: np.ndarray,
        colour: Colour = BLACK,
        material: str | Material | None = None,
        *,
        triangulator: Triangulator | None = None,
        materials: MaterialLibrary | None = None,
        base_offset: float = 0.0,
        visible: bool = True,
    ) -> PrismEntity:
        """Build a prism from a polygon ring.

        Args:
            name: Identifier of the prism.
            height: Extrusion height in world units.
            ring: Footprint vertices, shape ``(n, 2)``, either winding.
                The caller's array is not modified.
            colour: Tint colour.  Hidden prisms keep it but are tinted
                black.
            material: A library material name, a :class:`Material` to
                share, or ``None`` for a per-prism fallback material.
            triangulator: Cap triangulator (default Delaunay).
            materials: Library used to resolve *material* by name.
            base_offset: Vertical position of the prism base.
            visible: Whether the prism is shown.  A hidden prism draws
                with its own fallback material, so a shared material is
                never blacked out.

        Returns:
            The new :class:`PrismEntity`.

        Raises:
            InvalidRingError: If *ring* has fewer than 3 vertices or
                is malformed.
            DegeneratePolygonError: If *ring* encloses no area.
            TriangulationError: If a cap cannot be triangulated.
            ValueError: If *height* is negative or not finite, or
                *colour* cannot be interpreted.
        """
        height = _check_height(height)
        rgba = normalise_rgba(colour)
        props = analyse_ring(ring)
        prism_mesh = build_prism_mesh(
            props.ring, UNIT_TOP_Y, props.centroid, triangulator=triangulator,
        )

        if materials is None:
            materials = MaterialLibrary()
        if visible:
            resolved = _resolve_material(name, material, materials)
        else:
            resolved = materials.fallback()

        descriptor = PrismDescriptor(
            name=name,
            height=height,
            colour=rgba,
            material=resolved,
            ring=props.ring,
            area=props.area,
            centroid=props.centroid,
            visible=visible,
        )
        resolved.set_tint(descriptor.effective_colour())
        transform = LocalTransform(
            position=(props.centroid[0], base_offset, props.centroid[1]),
            scale=(1.0, height, 1.0),
        )
        logger.debug(
            "Created prism %r: %d vertices, area %g",
            name, len(props.ring), props.area,
        )
        return cls(
            descriptor, prism_mesh, transform,
            triangulator=triangulator, materials=materials,
            requested_material=material,
        )

    def __repr__(self) -> str:
        return (
            f"PrismEntity(name={self.name!r}, n_vertices={len(self.ring)}, "
            f"area={self.area:g}, height={self.height:g})"
        )

    # ---- State ----

    @property
    def descriptor(self) -> PrismDescriptor:
        return self._descriptor

    @property
    def name(self) -> str:
        return self._descriptor.name

    @property
    def ring(self) -> np.ndarray:
        """Clockwise footprint ring in world coordinates, shape ``(n, 2)``."""
        return self._descriptor.ring

    @property
    def area(self) -> float:
        return self._descriptor.area

    @property
    def centroid(self) -> np.ndarray:
        return self._descriptor.centroid

    @property
    def height(self) -> float:
        return self._descriptor.height

    @property
    def colour(self) -> RGBA8:
        return self._descriptor.colour

    @property
    def material(self) -> Material:
        return self._descriptor.material

    @property
    def visible(self) -> bool:
        return self._descriptor.visible

    @property
    def mesh(self) -> Mesh:
        """The combined prism mesh in local (centroid-anchored) space."""
        return self._prism_mesh.mesh

    @property
    def prism_mesh(self) -> PrismMesh:
        return self._prism_mesh

    @property
    def transform(self) -> LocalTransform:
        return self._transform

    def world_vertices(self) -> np.ndarray:
        """Mesh vertices with the local transform applied, shape ``(n, 3)``."""
        return self._transform.apply(self.mesh.vertices)

    # ---- Updates ----

    def update_ring(self, ring: np.ndarray) -> None:
        """Replace the footprint and rebuild the mesh from scratch.

        Everything is recomputed before any state changes, so a
        failure leaves the prism exactly as it was.

        Raises:
            InvalidRingError: If *ring* is malformed.
            DegeneratePolygonError: If *ring* encloses no area.
            TriangulationError: If a cap cannot be triangulated.
        """
        props = analyse_ring(ring)
        prism_mesh = build_prism_mesh(
            props.ring, UNIT_TOP_Y, props.centroid,
            triangulator=self._triangulator,
        )

        self._prism_mesh = prism_mesh
        self._descriptor.ring = props.ring
        self._descriptor.area = props.area
        self._descriptor.centroid = props.centroid
        self._transform.position = np.array([
            props.centroid[0], self._transform.position[1], props.centroid[1],
        ])
        logger.debug(
            "Rebuilt prism %r: %d vertices, area %g",
            self.name, len(props.ring), props.area,
        )

    def update_height(self, height: float) -> None:
        """Change the extrusion height by rescaling, without a rebuild.

        Raises:
            ValueError: If *height* is negative or not finite.
        """
        height = _check_height(height)
        self._descriptor.height = height
        self._transform.scale = np.array([1.0, height, 1.0])

    def update_colour(self, colour: Colour) -> None:
        """Retint the prism's material.

        When the material is shared (see :attr:`Material.shared`),
        every prism holding it changes colour too.  A hidden prism
        stores the colour and shows it once visible again.

        Raises:
            ValueError: If *colour* cannot be interpreted.
        """
        rgba = normalise_rgba(colour)
        if self.visible and self.material.shared:
            logger.debug(
                "Retinting material %r shared by %d prisms",
                self.material.name, self.material.users,
            )
        self._descriptor.colour = rgba
        self.material.set_tint(self._descriptor.effective_colour())

    def set_visible(self, visible: bool) -> None:
        """Show or hide the prism.  Geometry and requested colour are kept.

        Hiding swaps in a black fallback material; showing resolves the
        requested material again and retints it.
        """
        visible = bool(visible)
        if visible == self.visible:
            return
        if visible:
            material = _resolve_material(
                self.name, self._requested_material, self._materials,
            )
        else:
            material = self._materials.fallback()
        self._materials.release(self.material)
        self._descriptor.material = material
        self._descriptor.visible = visible
        material.set_tint(self._descriptor.effective_colour())

    def release(self) -> None:
        """Give the material back to its library.  Called on removal."""
        self._materials.release(self.material)
