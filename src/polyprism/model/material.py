from __future__ import annotations

from dataclasses import dataclass, field

from polyprism._constants import FALLBACK_MATERIAL_NAME, FALLBACK_SHADER
from polyprism.errors import MissingAssetError
from polyprism.model.colour import BLACK, RGBA8, Colour, normalise_rgba


@dataclass(eq=False)
class Material:
    """A render material handle with a mutable tint.

    Materials are compared by identity: two prisms share a material
    only if they hold the same instance.  :attr:`users` counts the
    prisms that acquired it through a :class:`MaterialLibrary`, so a
    tint change on a shared material can be detected before it is
    made.

    Attributes:
        name: Library key, or ``"fallback"`` for per-prism defaults.
        shader: Identifier of the shader the render environment binds.
        tint: Current colour as an ``(r, g, b, a)`` byte tuple.
        users: Number of prisms currently holding this material.
    """

    name: str
    shader: str = FALLBACK_SHADER
    tint: RGBA8 = BLACK
    users: int = field(default=0, compare=False)

    @property
    def shared(self) -> bool:
        """Whether more than one prism currently holds this material."""
        return self.users > 1

    def set_tint(self, colour: Colour) -> None:
        """Replace the tint.  Affects every prism holding this material."""
        self.tint = normalise_rgba(colour)


class MaterialLibrary:
    """Named materials shared explicitly between prisms.

    :meth:`acquire` hands out the *same* :class:`Material` instance for
    a given name and counts it; :meth:`fallback` creates a fresh,
    unshared instance.  Shared tints are therefore always opt-in by
    name.

    Args:
        materials: Optional initial ``{name: shader}`` mapping.
        fallback_shader: Shader used for fallback materials.
    """

    def __init__(
        self,
        materials: dict[str, str] | None = None,
        *,
        fallback_shader: str = FALLBACK_SHADER,
    ) -> None:
        self.fallback_shader = fallback_shader
        self._materials: dict[str, Material] = {}
        for name, shader in (materials or {}).items():
            self.register(name, shader)

    def __contains__(self, name: object) -> bool:
        return name in self._materials

    def __len__(self) -> int:
        return len(self._materials)

    def names(self) -> list[str]:
        return sorted(self._materials)

    def register(self, name: str, shader: str | None = None) -> Material:
        """Add a named material, or return the existing one.

        Raises:
            ValueError: If *name* is empty.
        """
        if not name:
            raise ValueError("material name must be non-empty")
        if name not in self._materials:
            self._materials[name] = Material(
                name=name, shader=shader or self.fallback_shader,
            )
        return self._materials[name]

    def get(self, name: str) -> Material:
        """Look up a material without acquiring it.

        Raises:
            MissingAssetError: If *name* is not registered.
        """
        try:
            return self._materials[name]
        except KeyError:
            raise MissingAssetError(f"no material named {name!r}") from None

    def acquire(self, name: str) -> Material:
        """Return the shared material for *name* and count one more user.

        Raises:
            MissingAssetError: If *name* is not registered.
        """
        material = self.get(name)
        material.users += 1
        return material

    def release(self, material: Material) -> None:
        """Give back a material obtained from :meth:`acquire` or :meth:`fallback`."""
        if material.users > 0:
            material.users -= 1

    def fallback(self) -> Material:
        """Create a new, unshared default material held by one prism."""
        return Material(
            name=FALLBACK_MATERIAL_NAME, shader=self.fallback_shader, users=1,
        )
