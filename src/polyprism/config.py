"""Extrusion configuration: save/load as JSON and registry assembly."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from polyprism._constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_PARALLEL_THRESHOLD,
    FALLBACK_SHADER,
)
from polyprism.construction.triangulation import Triangulator
from polyprism.conversion import CoordinateConverter
from polyprism.model._util import _field_defaults
from polyprism.model.material import MaterialLibrary
from polyprism.model.transform import AffineTransform
from polyprism.registry import PrismRegistry

_VALID_KEYS = frozenset({
    "transform", "fallback_shader", "base_offset",
    "parallel_threshold", "chunk_size", "materials",
})

_TRANSFORM_KEYS = ("coef_x", "coef_y", "offset_x", "offset_y")


@dataclass
class ExtrusionConfig:
    """Settings fixed once per coordinate system.

    Attributes:
        transform: Grid-to-world coordinate transform.
        fallback_shader: Shader for prisms without a resolvable
            material.
        base_offset: Vertical position of every prism base.
        parallel_threshold: Batch size at which coordinate conversion
            uses worker threads.
        chunk_size: Points per conversion worker task.
        materials: Named materials to register, ``{name: shader}``.
    """

    transform: AffineTransform = field(default_factory=AffineTransform)
    fallback_shader: str = FALLBACK_SHADER
    base_offset: float = 0.0
    parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD
    chunk_size: int = DEFAULT_CHUNK_SIZE
    materials: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.parallel_threshold <= 0:
            raise ValueError(
                f"parallel_threshold must be positive, got {self.parallel_threshold}"
            )
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")

    def to_dict(self) -> dict:
        """Serialise to a JSON-compatible dictionary.

        Fields at their default values are omitted.
        """
        d: dict = {}
        transform = self.transform.to_dict()
        if transform:
            d["transform"] = transform
        for field_name, default in _field_defaults(type(self)).items():
            val = getattr(self, field_name)
            if val != default:
                d[field_name] = val
        if self.materials:
            d["materials"] = dict(self.materials)
        return d

    @classmethod
    def from_dict(cls, d: dict) -> ExtrusionConfig:
        """Deserialise from a dictionary.

        Raises:
            ValueError: If *d* contains unknown keys.
        """
        unknown = set(d) - _VALID_KEYS
        if unknown:
            raise ValueError(f"unknown configuration keys: {sorted(unknown)}")
        kwargs: dict = {}
        if "transform" in d:
            kwargs["transform"] = AffineTransform.from_dict(d["transform"])
        for field_name in _field_defaults(cls):
            if field_name in d:
                kwargs[field_name] = d[field_name]
        if "materials" in d:
            kwargs["materials"] = dict(d["materials"])
        return cls(**kwargs)

    @classmethod
    def from_connection_parameters(cls, params: dict) -> ExtrusionConfig:
        """Build a configuration from a simulation's connection handshake.

        Only ``precision`` is required.  ``coef_x``, ``coef_y``,
        ``offset_x`` and ``offset_y`` override the identity map when
        present; the remaining handshake fields describe the viewer
        and are ignored.

        Raises:
            KeyError: If ``precision`` is missing.
        """
        transform_kwargs = {k: params[k] for k in _TRANSFORM_KEYS if k in params}
        return cls(
            transform=AffineTransform(precision=params["precision"], **transform_kwargs),
        )

    def build_converter(self) -> CoordinateConverter:
        return CoordinateConverter(
            self.transform,
            parallel_threshold=self.parallel_threshold,
            chunk_size=self.chunk_size,
        )

    def build_materials(self) -> MaterialLibrary:
        return MaterialLibrary(self.materials, fallback_shader=self.fallback_shader)

    def build_registry(self, *, triangulator: Triangulator | None = None) -> PrismRegistry:
        """Assemble a converter, material library and empty registry."""
        return PrismRegistry(
            self.build_converter(),
            triangulator=triangulator,
            materials=self.build_materials(),
            base_offset=self.base_offset,
        )


def save_config(path: str | Path, config: ExtrusionConfig) -> None:
    """Write *config* to a JSON file with two-space indentation."""
    Path(path).write_text(json.dumps(config.to_dict(), indent=2) + "\n")


def load_config(path: str | Path) -> ExtrusionConfig:
    """Read an :class:`ExtrusionConfig` from a JSON file.

    Missing keys take their defaults.

    Raises:
        ValueError: If the file contains unknown top-level keys or
            invalid values.
    """
    data = json.loads(Path(path).read_text())
    return ExtrusionConfig.from_dict(data)
