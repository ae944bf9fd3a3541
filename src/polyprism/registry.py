"""Catalogue of live prisms keyed by name.

The registry turns raw integer point buffers into prisms and keeps
them up to date.  Writers (create, update, remove, reset) are
serialised by a lock; readers never block.  Each write publishes a new
mapping, so a lookup or iteration always sees a consistent snapshot.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field

import numpy as np

from polyprism.construction.triangulation import Triangulator
from polyprism.conversion import CoordinateConverter
from polyprism.entity import PrismEntity
from polyprism.errors import InvalidRingError, PrismError
from polyprism.model.material import MaterialLibrary
from polyprism.model.properties import PrismProperties

logger = logging.getLogger(__name__)

# Errors that fail a single batch item without affecting the others.
_ITEM_ERRORS = (PrismError, ValueError, KeyError)


@dataclass
class PrismRequest:
    """One polygon to create.

    Attributes:
        name: Identifier of the prism.
        points: Integer grid points, flat ``[x0, y0, ...]`` or ``(n, 2)``.
        properties: Display properties; defaults apply when omitted.
    """

    name: str
    points: np.ndarray
    properties: PrismProperties = field(default_factory=PrismProperties)


@dataclass
class BatchResult:
    """Outcome of a batch create or update.

    Attributes:
        created: Prisms created or updated successfully, in request
            order.
        failed: Error raised for each failed request, keyed by name.
    """

    created: list[PrismEntity] = field(default_factory=list)
    failed: dict[str, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether every request succeeded."""
        return not self.failed


class PrismRegistry:
    """Creates, looks up and updates prisms from raw point buffers.

    Args:
        converter: Converts incoming integer points to world points.
        triangulator: Cap triangulator passed to every prism.
        materials: Library used to resolve material names.  A new
            empty library is used when omitted.
        base_offset: Vertical position given to every prism base.
    """

    def __init__(
        self,
        converter: CoordinateConverter,
        *,
        triangulator: Triangulator | None = None,
        materials: MaterialLibrary | None = None,
        base_offset: float = 0.0,
    ) -> None:
        self.converter = converter
        self.triangulator = triangulator
        self.materials = materials if materials is not None else MaterialLibrary()
        self.base_offset = base_offset
        self._entities: dict[str, PrismEntity] = {}
        self._lock = threading.Lock()

    # ---- Reads ----

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, name: object) -> bool:
        return name in self._entities

    def __getitem__(self, name: str) -> PrismEntity:
        return self._entities[name]

    def __iter__(self) -> Iterator[PrismEntity]:
        return iter(list(self._entities.values()))

    def get(self, name: str) -> PrismEntity | None:
        return self._entities.get(name)

    def names(self) -> list[str]:
        return list(self._entities)

    # ---- Writes ----

    def _convert(self, points: np.ndarray) -> np.ndarray:
        try:
            return self.converter.convert_batch(points)
        except ValueError as exc:
            raise InvalidRingError(str(exc)) from exc

    def _publish(self, name: str, entity: PrismEntity) -> None:
        with self._lock:
            previous = self._entities.get(name)
            self._entities = {**self._entities, name: entity}
        if previous is not None and previous is not entity:
            previous.release()

    def create(
        self,
        name: str,
        points: np.ndarray,
        properties: PrismProperties | None = None,
    ) -> PrismEntity:
        """Convert *points* and build a prism, replacing any prism of that name.

        Raises:
            InvalidRingError: If *points* is malformed or too short.
            DegeneratePolygonError: If the converted ring has no area.
            TriangulationError: If a cap cannot be triangulated.
        """
        if properties is None:
            properties = PrismProperties()
        ring = self._convert(points)
        entity = PrismEntity.create(
            name,
            properties.world_height(self.converter.transform.precision),
            ring,
            properties.colour,
            properties.material,
            triangulator=self.triangulator,
            materials=self.materials,
            base_offset=self.base_offset,
            visible=properties.visible,
        )
        self._publish(name, entity)
        return entity

    def create_many(self, requests: Iterable[PrismRequest]) -> BatchResult:
        """Create a prism for every request.

        Failed requests are recorded in :attr:`BatchResult.failed` and
        logged; they are not retried and do not affect other entries.
        """
        result = BatchResult()
        for request in requests:
            try:
                entity = self.create(request.name, request.points, request.properties)
            except _ITEM_ERRORS as exc:
                logger.warning("Could not create prism %r: %s", request.name, exc)
                result.failed[request.name] = exc
            else:
                result.created.append(entity)
        return result

    def update(self, name: str, points: np.ndarray) -> PrismEntity:
        """Convert *points* and rebuild the named prism's footprint.

        On failure the prism keeps its previous state.

        Raises:
            KeyError: If no prism has this name.
            InvalidRingError: If *points* is malformed or too short.
            DegeneratePolygonError: If the converted ring has no area.
        """
        ring = self._convert(points)
        with self._lock:
            entity = self._entities[name]
            entity.update_ring(ring)
        return entity

    def update_many(
        self,
        updates: Mapping[str, np.ndarray] | Iterable[tuple[str, np.ndarray]],
    ) -> BatchResult:
        """Apply ``(name, points)`` updates, collecting failures per name."""
        items = updates.items() if isinstance(updates, Mapping) else updates
        result = BatchResult()
        for name, points in items:
            try:
                entity = self.update(name, points)
            except _ITEM_ERRORS as exc:
                logger.warning("Could not update prism %r: %s", name, exc)
                result.failed[name] = exc
            else:
                result.created.append(entity)
        return result

    def remove(self, name: str) -> PrismEntity:
        """Remove and return the named prism.

        Raises:
            KeyError: If no prism has this name.
        """
        with self._lock:
            entities = dict(self._entities)
            entity = entities.pop(name)
            self._entities = entities
        entity.release()
        return entity

    def reset(self) -> None:
        """Remove every prism."""
        with self._lock:
            previous = self._entities
            self._entities = {}
        for entity in previous.values():
            entity.release()
