"""Batch conversion of integer grid coordinates to world-space points.

Every point is converted independently, so large batches are split
into chunks and converted on a thread pool (numpy releases the GIL in
the element-wise kernels).  Small batches run as one vectorised
expression.  Both paths apply the same operations in the same order
and therefore give bit-identical results.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from polyprism._constants import DEFAULT_CHUNK_SIZE, DEFAULT_PARALLEL_THRESHOLD
from polyprism.model.transform import AffineTransform

logger = logging.getLogger(__name__)


def _as_point_pairs(points: np.ndarray) -> np.ndarray:
    """Coerce a flat ``[x0, y0, x1, y1, ...]`` buffer or ``(n, 2)`` array to ``(n, 2)``.

    Raises:
        ValueError: If the buffer has an odd length, the wrong shape,
            or a non-integer dtype.
    """
    arr = np.asarray(points)
    if arr.size == 0:
        return np.empty((0, 2), dtype=np.int64)
    if arr.dtype.kind not in ("i", "u"):
        raise ValueError(f"grid coordinates must be integers, got dtype {arr.dtype}")
    if arr.ndim == 1:
        if len(arr) % 2:
            raise ValueError(
                f"flat point buffer must have an even length, got {len(arr)}"
            )
        return arr.reshape(-1, 2)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"points must have shape (n, 2), got {arr.shape}")
    return arr


def _convert_into(
    out: np.ndarray,
    pairs: np.ndarray,
    transform: AffineTransform,
) -> None:
    """Write the converted *pairs* into *out* (both ``(n, 2)``)."""
    x = pairs[:, 0].astype(np.float64)
    y = pairs[:, 1].astype(np.float64)
    out[:, 0] = transform.coef_x * x / transform.precision + transform.offset_x
    out[:, 1] = transform.coef_y * y / transform.precision + transform.offset_y


class CoordinateConverter:
    """Stateless converter from integer grid points to world points.

    Args:
        transform: The affine map to apply.
        parallel_threshold: Batches with at least this many points are
            converted on worker threads.
        chunk_size: Points per worker task.
        max_workers: Thread pool size, or ``None`` for the
            :class:`~concurrent.futures.ThreadPoolExecutor` default.

    Raises:
        ValueError: If *parallel_threshold* or *chunk_size* is not
            positive.
    """

    def __init__(
        self,
        transform: AffineTransform,
        *,
        parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_workers: int | None = None,
    ) -> None:
        if parallel_threshold <= 0:
            raise ValueError(
                f"parallel_threshold must be positive, got {parallel_threshold}"
            )
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.transform = transform
        self.parallel_threshold = parallel_threshold
        self.chunk_size = chunk_size
        self.max_workers = max_workers

    def __repr__(self) -> str:
        return (
            f"CoordinateConverter({self.transform!r}, "
            f"parallel_threshold={self.parallel_threshold}, "
            f"chunk_size={self.chunk_size})"
        )

    def convert_batch(self, points: np.ndarray) -> np.ndarray:
        """Convert integer grid points to world coordinates.

        Args:
            points: Either a flat integer buffer ``[x0, y0, x1, y1, ...]``
                or an integer array of shape ``(n, 2)``.

        Returns:
            Float array of shape ``(n, 2)``; row ``i`` depends only on
            input point ``i``.
        """
        pairs = _as_point_pairs(points)
        out = np.empty(pairs.shape, dtype=np.float64)
        n = len(pairs)
        if n < self.parallel_threshold:
            _convert_into(out, pairs, self.transform)
            return out

        starts = range(0, n, self.chunk_size)
        logger.debug(
            "Converting %d points in %d chunks", n, len(starts),
        )
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(
                    _convert_into,
                    out[start:start + self.chunk_size],
                    pairs[start:start + self.chunk_size],
                    self.transform,
                )
                for start in starts
            ]
            for future in futures:
                future.result()
        return out

    def convert_point(self, x: int, y: int) -> tuple[float, float]:
        """Convert a single grid point."""
        converted = self.convert_batch(np.array([[x, y]], dtype=np.int64))
        return float(converted[0, 0]), float(converted[0, 1])
