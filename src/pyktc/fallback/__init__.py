"""In-memory stand-in for the backend while it is unreachable."""

from __future__ import annotations

import builtins
import copy
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Generic

from pyktc.exceptions import KtcValidationError
from pyktc.models.common import EntityT, FiltersT, StatsT
from pyktc.resources._base import Resource

_logger = logging.getLogger(__name__)


class FallbackRepository(Generic[EntityT]):
    """Per-instance dataset for one resource.

    Seeds are deep-copied and parsed on construction, so repositories
    never share state with each other or with :mod:`pyktc.fallback.seeds`.
    Insertion order is preserved.
    """

    def __init__(
        self,
        resource: Resource[EntityT, FiltersT, StatsT],
        seeds: Iterable[Mapping[str, Any] | EntityT] = (),
    ) -> None:
        self._resource = resource
        self._entities: dict[str, EntityT] = {}
        for seed in copy.deepcopy(list(seeds)):
            entity = resource.parse_entity(seed) if isinstance(seed, Mapping) else seed
            self._entities[resource.entity_id(entity)] = entity

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return str(entity_id) in self._entities

    def all(self) -> list[EntityT]:
        return list(self._entities.values())

    def list(self, filters: Any = None) -> builtins.list[EntityT]:
        """Entities matching *filters*, with the same semantics as the backend query."""
        if filters is None:
            filters = self._resource.default_filters()
        return self._resource.filter(self._entities.values(), filters)

    def get(self, entity_id: str | int) -> EntityT | None:
        return self._entities.get(str(entity_id))

    def require(self, entity_id: str | int) -> EntityT:
        entity = self.get(entity_id)
        if entity is None:
            raise KtcValidationError(
                f"{self._resource.label.capitalize()} not found",
                errors={"id": str(entity_id)},
            )
        return entity

    def add(self, entity: EntityT) -> EntityT:
        entity_id = self._resource.entity_id(entity)
        if entity_id in self._entities:
            raise KtcValidationError(
                f"{self._resource.label.capitalize()} {entity_id} already exists",
                errors={"id": entity_id},
            )
        self._entities[entity_id] = entity
        _logger.debug("Added %s %s to fallback data", self._resource.label, entity_id)
        return entity

    def replace(self, entity: EntityT) -> EntityT:
        entity_id = self._resource.entity_id(entity)
        self.require(entity_id)
        self._entities[entity_id] = entity
        return entity

    def remove(self, entity_id: str | int) -> EntityT:
        entity = self.require(entity_id)
        del self._entities[str(entity_id)]
        _logger.debug("Removed %s %s from fallback data", self._resource.label, entity_id)
        return entity


__all__ = ["FallbackRepository"]
