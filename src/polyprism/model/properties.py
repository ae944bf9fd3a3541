from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from polyprism.model._util import _field_defaults
from polyprism.model.colour import BLACK, RGBA8, Colour, normalise_rgba, rgba_from_channels
from polyprism.model.material import Material


@dataclass
class PrismProperties:
    """Per-polygon display properties as sent by a simulation.

    Attributes:
        height: Extrusion height in grid units.  Divided by the
            coordinate transform's precision to give world units.
        colour: Tint colour.  See :data:`~polyprism.model.colour.Colour`.
        material: Name of a library material, or ``None`` for a
            per-prism fallback material.
        visible: Whether the prism is shown.  Hidden prisms are
            still built but tinted black and reported hidden.
    """

    height: float = 0.0
    colour: Colour = BLACK
    material: str | None = None
    visible: bool = True

    def __post_init__(self) -> None:
        if not np.isfinite(self.height):
            raise ValueError(f"height must be finite, got {self.height}")
        self.colour = normalise_rgba(self.colour)

    def world_height(self, precision: int) -> float:
        """Height converted to world units for a given coordinate *precision*."""
        return float(self.height) / precision

    def to_dict(self) -> dict:
        """Serialise to a JSON-compatible dictionary.

        Fields at their default values are omitted; the colour is
        written as an ``[r, g, b, a]`` list.
        """
        defaults = _field_defaults(type(self))
        d: dict = {}
        for field_name, default in defaults.items():
            val = getattr(self, field_name)
            if val != default:
                d[field_name] = list(val) if field_name == "colour" else val
        return d

    @classmethod
    def from_dict(cls, d: dict) -> PrismProperties:
        """Deserialise from a dictionary.

        Besides ``colour``, separate integer ``red``, ``green``,
        ``blue`` and ``alpha`` channels are accepted, as sent by the
        simulation.  An empty ``material`` string means no material.
        """
        kwargs: dict = {}
        if "height" in d:
            kwargs["height"] = d["height"]
        if "colour" in d:
            val = d["colour"]
            kwargs["colour"] = tuple(val) if isinstance(val, list) else val
        elif "red" in d:
            kwargs["colour"] = rgba_from_channels(
                d["red"], d.get("green", 0), d.get("blue", 0), d.get("alpha", 255),
            )
        if d.get("material"):
            kwargs["material"] = d["material"]
        if "visible" in d:
            kwargs["visible"] = bool(d["visible"])
        return cls(**kwargs)


@dataclass
class PrismDescriptor:
    """Current state of one extruded polygon.

    *area* and *centroid* are derived from *ring* and are replaced
    together with it; nothing else writes them.

    Attributes:
        name: Identifier of the prism.
        height: Extrusion height in world units.
        colour: Requested tint colour, kept while the prism is hidden.
        material: Material the prism is drawn with.
        ring: Clockwise footprint ring, shape ``(n, 2)``.
        area: Footprint area.
        centroid: Footprint centroid, shape ``(2,)``.
        visible: Whether the prism is shown.
    """

    name: str
    height: float
    colour: RGBA8
    material: Material
    ring: np.ndarray
    area: float
    centroid: np.ndarray
    visible: bool = True

    def effective_colour(self) -> RGBA8:
        """The tint to apply: the requested colour, or black when hidden."""
        return self.colour if self.visible else BLACK
