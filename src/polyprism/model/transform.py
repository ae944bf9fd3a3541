from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from polyprism.model._util import _non_default_fields


@dataclass(frozen=True)
class AffineTransform:
    """Per-axis affine map from integer grid coordinates to world units.

    A grid coordinate ``g`` maps to ``coef * g / precision + offset``
    independently on each axis.  Simulations send coordinates as
    integers scaled by *precision* so that they survive a text
    transport without float formatting loss.

    Attributes:
        coef_x: Multiplier applied to x before dividing by *precision*.
        coef_y: Multiplier applied to y before dividing by *precision*.
        offset_x: World-space x offset added after scaling.
        offset_y: World-space y offset added after scaling.
        precision: Fixed-point scale of the incoming integers.  Must
            be positive.
    """

    coef_x: float = 1.0
    coef_y: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    precision: int = 1

    def __post_init__(self) -> None:
        if isinstance(self.precision, bool) or int(self.precision) != self.precision:
            raise ValueError(
                f"precision must be an integer, got {self.precision!r}"
            )
        if self.precision <= 0:
            raise ValueError(f"precision must be positive, got {self.precision}")

    def to_dict(self) -> dict:
        """Serialise to a JSON-compatible dictionary.

        Fields at their default values are omitted.
        """
        return _non_default_fields(self)

    @classmethod
    def from_dict(cls, d: dict) -> AffineTransform:
        """Deserialise from a dictionary.

        Raises:
            ValueError: If *d* contains unknown keys.
        """
        unknown = set(d) - {"coef_x", "coef_y", "offset_x", "offset_y", "precision"}
        if unknown:
            raise ValueError(f"unknown transform keys: {sorted(unknown)}")
        return cls(**d)


def _rotation_y(angle: float) -> np.ndarray:
    """Rotation matrix about the Y (vertical) axis by *angle* radians."""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [ c,  0.0,  s],
        [0.0, 1.0, 0.0],
        [-s,  0.0,  c],
    ])


def placement_matrix(
    scale: tuple[float, float, float] = (1.0, 1.0, 1.0),
    rotation_y: float = 0.0,
    translation: tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> np.ndarray:
    """Compose a 4x4 matrix that scales, then rotates about Y, then translates."""
    m = np.eye(4)
    m[:3, :3] = _rotation_y(rotation_y) @ np.diag(np.asarray(scale, dtype=float))
    m[:3, 3] = translation
    return m


def apply_matrix(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Apply a 4x4 affine *matrix* to an ``(n, 3)`` array of points."""
    points = np.asarray(points, dtype=float)
    return points @ matrix[:3, :3].T + matrix[:3, 3]


@dataclass
class LocalTransform:
    """Placement of a prism within its parent space.

    The prism mesh is authored around its footprint centroid; the
    render environment positions it by :attr:`position` and realises
    the extrusion height through :attr:`scale`.

    Attributes:
        position: Translation, shape ``(3,)``.
        scale: Per-axis scale, shape ``(3,)``.
    """

    position: np.ndarray = field(
        default_factory=lambda: np.zeros(3, dtype=float)
    )
    scale: np.ndarray = field(
        default_factory=lambda: np.ones(3, dtype=float)
    )

    def __post_init__(self) -> None:
        self.position = np.asarray(self.position, dtype=float)
        self.scale = np.asarray(self.scale, dtype=float)
        if self.position.shape != (3,):
            raise ValueError(
                f"position must have shape (3,), got {self.position.shape}"
            )
        if self.scale.shape != (3,):
            raise ValueError(f"scale must have shape (3,), got {self.scale.shape}")

    def matrix(self) -> np.ndarray:
        """Return the 4x4 local-to-parent matrix."""
        return placement_matrix(
            scale=tuple(self.scale), translation=tuple(self.position),
        )

    def apply(self, points: np.ndarray) -> np.ndarray:
        """Map local-space ``(n, 3)`` points into parent space."""
        points = np.asarray(points, dtype=float)
        return points * self.scale + self.position
