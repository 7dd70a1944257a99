"""Per-resource configuration for the generic sync core.

A :class:`Resource` tells the store and the mutation coordinator
everything that differs between stations, users and washing-bay
entries: routes, wire models, the fallback filter predicate, the
statistics aggregate, client-side validation, and how an offline
mutation rewrites an entity.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Generic

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from pyktc.exceptions import KtcConfigError, KtcMalformedResponseError
from pyktc.models.common import EntityT, FiltersT, MutationKind, StatsT, StatusChange


@dataclass(frozen=True, slots=True)
class Route:
    method: str
    path: str
    """Path template; ``{id}`` is replaced with the target id."""

    def render(self, **values: Any) -> str:
        return self.path.format(**values)


# (success title, failure title, ApiError code). "{Label}"/"{label}" are substituted.
_MUTATION_TEXT: dict[MutationKind, tuple[str, str, str]] = {
    MutationKind.CREATE: ("{Label} created successfully!", "Failed to create {label}", "CREATE_{CODE}_ERROR"),
    MutationKind.UPDATE: ("{Label} updated successfully!", "Failed to update {label}", "UPDATE_{CODE}_ERROR"),
    MutationKind.DELETE: ("{Label} deleted successfully!", "Failed to delete {label}", "DELETE_{CODE}_ERROR"),
    MutationKind.STATUS_CHANGE: (
        "{Label} status updated successfully!",
        "Failed to update {label} status",
        "UPDATE_STATUS_ERROR",
    ),
    MutationKind.ASSIGN: ("Manager assigned successfully!", "Failed to assign manager", "ASSIGN_MANAGER_ERROR"),
    MutationKind.UNASSIGN: ("Manager unassigned successfully!", "Failed to unassign manager", "UNASSIGN_MANAGER_ERROR"),
    MutationKind.RESET_PASSWORD: ("Password reset successfully!", "Failed to reset password", "RESET_PASSWORD_ERROR"),
}


def unique_id(prefix: str, existing: Iterable[str]) -> str:
    """Millisecond-timestamp id, bumped until it does not collide."""
    taken = set(existing)
    stamp = int(time.time() * 1000)
    while f"{prefix}-{stamp}" in taken:
        stamp += 1
    return f"{prefix}-{stamp}"


class Resource(ABC, Generic[EntityT, FiltersT, StatsT]):
    """Describes one synchronized entity type."""

    name: ClassVar[str]
    """Plural, lower-case name used in log lines (``"stations"``)."""
    label: ClassVar[str]
    """Singular name used in notifications (``"station"``)."""
    error_code: ClassVar[str]
    """Upper-case token used in :class:`~pyktc.models.ApiError` codes."""
    fetch_error_code: ClassVar[str]

    entity_type: type[EntityT]
    filters_type: type[FiltersT]
    stats_type: type[StatsT]

    list_route: ClassVar[Route]
    routes: ClassVar[Mapping[MutationKind, Route]] = {}
    payload_types: ClassVar[Mapping[MutationKind, type[BaseModel]]] = {}

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def default_filters(self) -> FiltersT:
        return self.filters_type()

    def list_endpoint(self) -> str:
        return self.list_route.path

    @abstractmethod
    def matches(self, entity: EntityT, filters: FiltersT) -> bool:
        """Fallback predicate; must agree with the backend's query semantics."""

    def filter(self, entities: Iterable[EntityT], filters: FiltersT) -> list[EntityT]:
        return [entity for entity in entities if self.matches(entity, filters)]

    def compute_stats(self, entities: Sequence[EntityT]) -> StatsT:
        stats: StatsT = self.stats_type.from_collection(entities)  # type: ignore[attr-defined]
        return stats

    def entity_id(self, entity: EntityT) -> str:
        return str(entity.id)  # type: ignore[attr-defined]

    def parse_entity(self, item: Any) -> EntityT:
        return self.entity_type.model_validate(item)

    def parse_list(self, body: Mapping[str, Any]) -> tuple[list[EntityT], StatsT | None]:
        """Extract entities and optional statistics from a list response.

        Accepts ``data`` or ``content``, holding either a list or an object
        with ``entries`` (and possibly ``stats``).
        """
        payload: Any = body["data"] if "data" in body else body.get("content")
        stats_raw: Any = body.get("stats")
        if isinstance(payload, Mapping):
            stats_raw = payload.get("stats", stats_raw)
            payload = payload.get("entries", payload.get("content"))
        if payload is None:
            payload = []
        if not isinstance(payload, list):
            raise KtcMalformedResponseError(
                f"Expected a list of {self.name}, got {type(payload).__name__}",
                code="MALFORMED_RESPONSE",
                endpoint=self.list_endpoint(),
            )
        try:
            entities = [self.parse_entity(item) for item in payload]
            stats = self.stats_type.model_validate(stats_raw) if isinstance(stats_raw, Mapping) else None
        except PydanticValidationError as exc:
            raise KtcMalformedResponseError(
                f"Invalid {self.label} payload: {exc.error_count()} validation error(s)",
                code="MALFORMED_RESPONSE",
                endpoint=self.list_endpoint(),
            ) from exc
        return entities, stats

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def supports(self, kind: MutationKind) -> bool:
        return kind in self.routes

    def require(self, kind: MutationKind) -> None:
        if not self.supports(kind):
            raise KtcConfigError(f"{self.name} do not support {kind.value} mutations")

    def prepare(self, kind: MutationKind, payload: Any) -> BaseModel | None:
        """Coerce a caller payload into the model for *kind*.

        Raises pydantic's ``ValidationError`` for payloads that cannot be coerced.
        """
        model_type = self.payload_types.get(kind)
        if model_type is None:
            return None
        if isinstance(payload, model_type):
            return payload
        if isinstance(payload, BaseModel):
            payload = payload.model_dump()
        return model_type.model_validate(payload or {})

    def validate(self, kind: MutationKind, form: BaseModel | None) -> dict[str, str]:
        """Client-side checks; an empty mapping means the payload may be sent."""
        return {}

    def route_for(self, kind: MutationKind, target_id: str | None, form: BaseModel | None) -> tuple[str, str]:
        self.require(kind)
        route = self.routes[kind]
        return route.method, route.render(id=target_id)

    @abstractmethod
    def request_body(
        self,
        kind: MutationKind,
        form: BaseModel | None,
        target_id: str | None,
        actor: str,
    ) -> dict[str, Any] | None:
        """JSON body sent for a remote mutation."""

    def success_title(self, kind: MutationKind) -> str:
        return self._text(kind, 0)

    def failure_title(self, kind: MutationKind) -> str:
        return self._text(kind, 1)

    def mutation_error_code(self, kind: MutationKind) -> str:
        return self._text(kind, 2)

    def _text(self, kind: MutationKind, index: int) -> str:
        template = _MUTATION_TEXT[kind][index]
        return template.format(Label=self.label.capitalize(), label=self.label, CODE=self.error_code)

    # Offline builders. Entities are frozen, so each returns a new instance.

    def build_created(self, form: Any, existing: Sequence[EntityT], actor: str) -> EntityT:
        raise KtcConfigError(f"{self.name} cannot be created offline")

    def apply_update(self, entity: EntityT, form: Any, actor: str) -> EntityT:
        raise KtcConfigError(f"{self.name} cannot be updated offline")

    def apply_status(self, entity: EntityT, change: StatusChange, actor: str) -> EntityT:
        raise KtcConfigError(f"{self.name} do not support status changes")

    def apply_assign(self, entity: EntityT, form: Any, actor: str) -> EntityT:
        raise KtcConfigError(f"{self.name} do not support manager assignment")

    def apply_unassign(self, entity: EntityT, actor: str) -> EntityT:
        raise KtcConfigError(f"{self.name} do not support manager assignment")

    def apply_password_reset(self, entity: EntityT, form: Any, actor: str) -> EntityT:
        raise KtcConfigError(f"{self.name} do not support password resets")
