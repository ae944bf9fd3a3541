"""Shared constants used across the geometry, model and construction layers."""

AREA_EPSILON: float = 1e-9
"""Polygons with an absolute area below this are treated as degenerate."""

FALLBACK_SHADER: str = "Universal Render Pipeline/Lit"
"""Shader assigned to prisms whose material cannot be resolved."""

FALLBACK_MATERIAL_NAME: str = "fallback"
"""Name given to per-prism fallback materials."""

DEFAULT_BOTTOM_Y: float = 0.0
"""Local height of the bottom cap."""

UNIT_TOP_Y: float = 1.0
"""Local height of the top cap for meshes extruded at unit height."""

DEFAULT_PARALLEL_THRESHOLD: int = 1024
"""Point count at which batch conversion is split across worker threads."""

DEFAULT_CHUNK_SIZE: int = 4096
"""Number of points converted per worker task."""
