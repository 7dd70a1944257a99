"""Models shared by every synchronized resource."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

EntityT = TypeVar("EntityT", bound=BaseModel)
StatsT = TypeVar("StatsT", bound=BaseModel)
FiltersT = TypeVar("FiltersT", bound=BaseModel)


def utcnow() -> datetime:
    return datetime.now(UTC)


class DataSource(StrEnum):
    """Provenance of a collection/statistics pair."""

    REMOTE = "remote"
    FALLBACK = "fallback"


class MutationKind(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    STATUS_CHANGE = "status_change"
    ASSIGN = "assign"
    UNASSIGN = "unassign"
    RESET_PASSWORD = "reset_password"


class MutationState(StrEnum):
    IDLE = "idle"
    SUBMITTING = "submitting"


class ConnectionStatus(BaseModel):
    """Result of one health probe.

    A new instance is created by every probe; instances are never mutated.
    """

    model_config = ConfigDict(frozen=True)

    connected: bool
    last_checked: datetime = Field(default_factory=utcnow)
    endpoint: str
    response_time_ms: float | None = None
    last_sync_time: datetime | None = None
    error: str | None = None


class ApiError(BaseModel):
    """Structured record of a failed operation, kept for diagnostics."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    timestamp: datetime = Field(default_factory=utcnow)
    related_id: str | None = None
    exception_type: str | None = None

    @classmethod
    def from_exception(cls, code: str, exc: BaseException, *, related_id: str | None = None) -> ApiError:
        return cls(
            code=code,
            message=str(exc) or type(exc).__name__,
            related_id=related_id,
            exception_type=type(exc).__name__,
        )


class MutationIntent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: MutationKind
    target_id: str | None = None
    # Secrets are masked; the coordinator submits the original payload.
    payload: dict[str, Any] = Field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class FetchResult(Generic[EntityT, StatsT]):
    """Outcome of :meth:`SyncedCollectionStore.fetch`.

    ``skipped`` is set when the duplicate-suppression guard returned the
    current state without touching the network or the fallback dataset.
    """

    collection: Sequence[EntityT]
    statistics: StatsT
    source: DataSource
    filters: BaseModel
    error: ApiError | None = None
    skipped: bool = False
    connection: ConnectionStatus | None = field(default=None)


class StatusChange(BaseModel):
    """Payload of a status-change mutation."""

    model_config = ConfigDict(frozen=True)

    status: str
    reason: str | None = None
