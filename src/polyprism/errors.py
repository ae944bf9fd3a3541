"""Exception hierarchy for polygon extrusion failures.

Every error raised by polyprism derives from :class:`PrismError`, so
callers handling update batches can catch a single type.  The
argument-validation errors also derive from :class:`ValueError` so they
read naturally next to the built-in checks.
"""


class PrismError(Exception):
    """Base class for all polyprism errors."""


class InvalidRingError(PrismError, ValueError):
    """The input is not a usable polygon ring.

    Raised before any geometry is computed, for example when fewer than
    three vertices are given or the coordinates are not finite.
    """


class DegeneratePolygonError(PrismError, ValueError):
    """The polygon ring encloses no area.

    Attributes:
        area: The computed (absolute) area that fell below tolerance.
    """

    def __init__(self, message: str, area: float = 0.0) -> None:
        super().__init__(message)
        self.area = area


class TriangulationError(PrismError, RuntimeError):
    """The triangulator could not produce faces for a cap."""


class MissingAssetError(PrismError, LookupError):
    """A requested material could not be resolved."""
