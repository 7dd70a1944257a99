"""Serialized mutations against one synchronized collection.

Every operation returns ``True`` when the change was accepted and
applied, ``False`` otherwise. At most one operation runs at a time: a
call made while another is submitting returns ``False`` immediately.

The two paths differ:

* **remote** (backend reachable): send the request, then force an
  authoritative refetch. Nothing is merged client-side.
* **fallback** (backend unreachable): rewrite the entity in the
  fallback repository and recompute statistics from the result. This is
  final; nothing is replayed when the backend comes back.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Generic

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from pyktc._constants import DEFAULT_ACTOR_NAME
from pyktc._redact import redact_for_log
from pyktc._transport import Transport
from pyktc.connection import ConnectionStatusProvider
from pyktc.exceptions import KtcError, KtcValidationError
from pyktc.fallback import FallbackRepository
from pyktc.models.common import (
    ApiError,
    EntityT,
    FiltersT,
    MutationIntent,
    MutationKind,
    MutationState,
    StatsT,
    StatusChange,
)
from pyktc.notify import LoggingNotificationSink, NotificationSink
from pyktc.store import SyncedCollectionStore
from pyktc.validation import errors_from_pydantic

_logger = logging.getLogger(__name__)


def _payload_dict(payload: Any) -> dict[str, Any]:
    if payload is None:
        return {}
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", exclude_none=True)
    if isinstance(payload, Mapping):
        return dict(payload)
    raise TypeError(f"Unsupported mutation payload: {type(payload).__name__}")


class MutationCoordinator(Generic[EntityT, FiltersT, StatsT]):
    def __init__(
        self,
        store: SyncedCollectionStore[EntityT, FiltersT, StatsT],
        transport: Transport,
        connection: ConnectionStatusProvider,
        repository: FallbackRepository[EntityT],
        notifier: NotificationSink | None = None,
        *,
        actor_name: str = DEFAULT_ACTOR_NAME,
    ) -> None:
        self._store = store
        self._resource = store.resource
        self._transport = transport
        self._connection = connection
        self._repository = repository
        self._notifier: NotificationSink = notifier or LoggingNotificationSink()
        self._actor = actor_name

        self._in_flight: MutationIntent | None = None
        self._validation_errors: dict[str, str] = {}
        self._last_error: ApiError | None = None

    @property
    def state(self) -> MutationState:
        return MutationState.IDLE if self._in_flight is None else MutationState.SUBMITTING

    @property
    def is_submitting(self) -> bool:
        return self._in_flight is not None

    @property
    def in_flight(self) -> MutationIntent | None:
        return self._in_flight

    @property
    def validation_errors(self) -> dict[str, str]:
        return dict(self._validation_errors)

    @property
    def last_error(self) -> ApiError | None:
        return self._last_error

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def create(self, payload: BaseModel | Mapping[str, Any]) -> bool:
        return await self._submit(MutationKind.CREATE, None, payload)

    async def update(self, entity_id: str | int, payload: BaseModel | Mapping[str, Any]) -> bool:
        return await self._submit(MutationKind.UPDATE, entity_id, payload)

    async def delete(self, entity_id: str | int) -> bool:
        return await self._submit(MutationKind.DELETE, entity_id, None)

    async def change_status(self, entity_id: str | int, status: str, reason: str | None = None) -> bool:
        return await self._submit(MutationKind.STATUS_CHANGE, entity_id, StatusChange(status=status, reason=reason))

    async def assign(self, entity_id: str | int, manager: BaseModel | Mapping[str, Any]) -> bool:
        return await self._submit(MutationKind.ASSIGN, entity_id, manager)

    async def unassign(self, entity_id: str | int) -> bool:
        return await self._submit(MutationKind.UNASSIGN, entity_id, None)

    async def reset_password(self, entity_id: str | int, request: BaseModel | Mapping[str, Any]) -> bool:
        return await self._submit(MutationKind.RESET_PASSWORD, entity_id, request)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _submit(self, kind: MutationKind, entity_id: str | int | None, payload: Any) -> bool:
        self._resource.require(kind)
        if self._in_flight is not None:
            _logger.debug(
                "Refusing %s on %s: %s already in flight",
                kind.value,
                self._resource.name,
                self._in_flight.kind.value,
            )
            return False

        target_id = str(entity_id) if entity_id is not None else None
        # Claimed before the first await; the guard is advisory, not a lock.
        self._in_flight = MutationIntent(
            kind=kind,
            target_id=target_id,
            payload=redact_for_log(_payload_dict(payload)),
        )
        try:
            try:
                form = self._resource.prepare(kind, payload)
            except PydanticValidationError as exc:
                return self._reject(errors_from_pydantic(exc))
            errors = self._resource.validate(kind, form)
            if errors:
                return self._reject(errors)
            self._validation_errors = {}

            status = await self._connection.probe()
            if status.connected:
                return await self._submit_remote(kind, target_id, form)
            return self._apply_offline(kind, target_id, form)
        finally:
            self._in_flight = None

    def _reject(self, errors: Mapping[str, str]) -> bool:
        self._validation_errors = dict(errors)
        _logger.debug("Rejected %s mutation: %s", self._resource.label, self._validation_errors)
        self._notifier.error("Validation failed", "Please fix the validation errors before submitting.")
        return False

    async def _submit_remote(self, kind: MutationKind, target_id: str | None, form: BaseModel | None) -> bool:
        method, endpoint = self._resource.route_for(kind, target_id, form)
        body = self._resource.request_body(kind, form, target_id, self._actor)
        try:
            response = await self._transport.call(endpoint, method, body=body)
        except KtcError as exc:
            self._fail(kind, target_id, exc)
            return False

        self._last_error = None
        _logger.debug("%s %s accepted (%s body)", method, endpoint, response.body_state.value)
        self._notifier.success(self._resource.success_title(kind), response.message)
        await self._store.fetch(force=True)
        return True

    def _apply_offline(self, kind: MutationKind, target_id: str | None, form: Any) -> bool:
        resource = self._resource
        repository = self._repository
        try:
            if kind is MutationKind.CREATE:
                entity = repository.add(resource.build_created(form, repository.all(), self._actor))
                target_id = resource.entity_id(entity)
            elif kind is MutationKind.DELETE:
                repository.remove(target_id)  # type: ignore[arg-type]
            else:
                current = repository.require(target_id)  # type: ignore[arg-type]
                if kind is MutationKind.UPDATE:
                    updated = resource.apply_update(current, form, self._actor)
                elif kind is MutationKind.STATUS_CHANGE:
                    updated = resource.apply_status(current, form, self._actor)
                elif kind is MutationKind.ASSIGN:
                    updated = resource.apply_assign(current, form, self._actor)
                elif kind is MutationKind.UNASSIGN:
                    updated = resource.apply_unassign(current, self._actor)
                else:
                    updated = resource.apply_password_reset(current, form, self._actor)
                repository.replace(updated)
        except KtcValidationError as exc:
            # Degenerate offline cases read like validation failures and leave
            # the connection status alone.
            self._last_error = ApiError.from_exception(resource.mutation_error_code(kind), exc, related_id=target_id)
            self._notifier.error(str(exc))
            return False

        self._store.apply_local(repository.list(self._store.filters))
        _logger.info("Applied %s to fallback %s (%s)", kind.value, resource.name, target_id)
        self._notifier.success(f"{resource.success_title(kind)} (offline)")
        return True

    def _fail(self, kind: MutationKind, target_id: str | None, exc: KtcError) -> None:
        self._last_error = ApiError.from_exception(
            self._resource.mutation_error_code(kind),
            exc,
            related_id=target_id,
        )
        _logger.warning("%s %s failed: %s", kind.value, self._resource.label, exc)
        self._notifier.error(self._resource.failure_title(kind), "Please try again later")
