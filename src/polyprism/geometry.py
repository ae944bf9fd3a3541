"""Polygon ring geometry: signed area, centroid, and winding order.

A ring is an ``(n, 2)`` array of vertices, implicitly closed (the last
vertex connects back to the first).  Rings are *clockwise* when
:func:`is_clockwise` holds, which for the usual y-up plane is exactly
when :func:`signed_area_2x` is non-positive.  The two tests are
computed from different sums and are expected to agree; the kernel
relies on that when it normalises winding before computing the
centroid.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from polyprism._constants import AREA_EPSILON
from polyprism.errors import DegeneratePolygonError, InvalidRingError


def as_ring(points: np.ndarray) -> np.ndarray:
    """Validate *points* and return them as a new ``(n, 2)`` float array.

    An explicit closing vertex (last equal to first) is dropped, since
    rings are implicitly closed.

    Raises:
        InvalidRingError: If the input is not an ``(n, 2)`` array of
            finite numbers with at least 3 distinct-position vertices.
    """
    try:
        ring = np.array(points, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidRingError(f"ring is not numeric: {exc}") from exc
    if ring.ndim != 2 or ring.shape[1] != 2:
        raise InvalidRingError(f"ring must have shape (n, 2), got {ring.shape}")
    if not np.all(np.isfinite(ring)):
        raise InvalidRingError("ring contains non-finite coordinates")
    if len(ring) >= 2 and np.array_equal(ring[0], ring[-1]):
        ring = ring[:-1]
    if len(ring) < 3:
        raise InvalidRingError(f"ring needs at least 3 vertices, got {len(ring)}")
    return ring


def signed_area_2x(ring: np.ndarray) -> float:
    """Twice the signed area of *ring* (shoelace sum).

    Positive for counter-clockwise rings, negative for clockwise ones.
    """
    ring = np.asarray(ring, dtype=float)
    x, y = ring[:, 0], ring[:, 1]
    x_next, y_next = np.roll(x, -1), np.roll(y, -1)
    return float(np.sum(x * y_next - x_next * y))


def polygon_area(ring: np.ndarray) -> float:
    """Absolute area enclosed by *ring*."""
    return abs(signed_area_2x(ring)) / 2.0


def centroid(
    ring: np.ndarray,
    area_2x: float | None = None,
    *,
    epsilon: float = AREA_EPSILON,
) -> np.ndarray:
    """Area centroid of *ring*.

    Accumulates ``cross_i = x_i*y_{i+1} - x_{i+1}*y_i`` and divides the
    weighted sums by ``3 * area_2x``.  The *signed* area is used so that
    the winding sign cancels.

    Args:
        ring: Array of shape ``(n, 2)``.
        area_2x: Precomputed :func:`signed_area_2x` of *ring*, or
            ``None`` to compute it here.
        epsilon: Areas below this are treated as zero.

    Returns:
        Array of shape ``(2,)``.

    Raises:
        DegeneratePolygonError: If the ring encloses (numerically) no
            area, in which case the centroid is undefined.
    """
    ring = np.asarray(ring, dtype=float)
    if area_2x is None:
        area_2x = signed_area_2x(ring)
    if abs(area_2x) / 2.0 < epsilon:
        raise DegeneratePolygonError(
            f"centroid undefined for zero-area ring (area={abs(area_2x) / 2.0:g})",
            area=abs(area_2x) / 2.0,
        )
    x, y = ring[:, 0], ring[:, 1]
    x_next, y_next = np.roll(x, -1), np.roll(y, -1)
    cross = x * y_next - x_next * y
    cx = np.sum((x + x_next) * cross)
    cy = np.sum((y + y_next) * cross)
    return np.array([cx, cy]) / (3.0 * area_2x)


def is_clockwise(ring: np.ndarray) -> bool:
    """Whether *ring* winds clockwise.

    Uses the edge sum ``sum((x_{i+1} - x_i) * (y_{i+1} + y_i))``, which
    is non-negative for clockwise rings.
    """
    ring = np.asarray(ring, dtype=float)
    x, y = ring[:, 0], ring[:, 1]
    x_next, y_next = np.roll(x, -1), np.roll(y, -1)
    return bool(np.sum((x_next - x) * (y_next + y)) >= 0.0)


def normalise_winding(ring: np.ndarray) -> np.ndarray:
    """Make *ring* clockwise by reversing its vertex order if needed.

    A writable float array is reversed in place and returned; any
    other input is converted and the converted array is returned.
    Applying this twice gives the same ring as applying it once.
    """
    ring = np.asarray(ring, dtype=float)
    if not is_clockwise(ring):
        if ring.flags.writeable:
            ring[:] = ring[::-1].copy()
        else:
            ring = ring[::-1].copy()
    return ring


@dataclass(frozen=True)
class RingProperties:
    """A normalised ring together with its derived measurements.

    Attributes:
        ring: Clockwise ring, shape ``(n, 2)``.
        area: Absolute enclosed area.
        centroid: Area centroid, shape ``(2,)``.
        signed_area_2x: Twice the signed area of *ring* (non-positive,
            since the ring is clockwise).
    """

    ring: np.ndarray
    area: float
    centroid: np.ndarray
    signed_area_2x: float


def analyse_ring(points: np.ndarray, *, epsilon: float = AREA_EPSILON) -> RingProperties:
    """Validate, normalise and measure a polygon ring in one step.

    The input is never modified.

    Raises:
        InvalidRingError: If *points* is not a valid ring.
        DegeneratePolygonError: If the ring's area is below *epsilon*.
    """
    ring = normalise_winding(as_ring(points))
    area_2x = signed_area_2x(ring)
    area = abs(area_2x) / 2.0
    if area < epsilon:
        raise DegeneratePolygonError(
            f"polygon area {area:g} is below tolerance {epsilon:g}", area=area,
        )
    ring.setflags(write=False)
    return RingProperties(
        ring=ring,
        area=area,
        centroid=centroid(ring, area_2x, epsilon=epsilon),
        signed_area_2x=area_2x,
    )
