"""High-level async client for the KTC Energy management backend."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Generic

import aiohttp

from pyktc._transport import HttpTransport, TokenProvider, Transport
from pyktc.config import KtcConfig
from pyktc.connection import ConnectionMonitor, ConnectionStatusProvider
from pyktc.debounce import FilterDebouncer
from pyktc.exceptions import KtcError
from pyktc.fallback import FallbackRepository, seeds
from pyktc.filters import StationFilters, UserFilters, WashingBayFilters
from pyktc.models.common import (
    ApiError,
    ConnectionStatus,
    DataSource,
    EntityT,
    FetchResult,
    FiltersT,
    MutationState,
    StatsT,
)
from pyktc.models.station import Station, StationStats
from pyktc.models.user import User, UserStats
from pyktc.models.washing_bay import WashingBayEntry, WashingBayStats
from pyktc.mutations import MutationCoordinator
from pyktc.notify import LoggingNotificationSink, NotificationSink
from pyktc.resources import Resource, StationsResource, UsersResource, WashingBayResource
from pyktc.store import SyncedCollectionStore

_logger = logging.getLogger(__name__)


class CollectionManager(Generic[EntityT, FiltersT, StatsT]):
    """Store, mutation coordinator and debouncer for one resource.

    This is the surface a screen binds to: read :attr:`collection` and
    :attr:`statistics`, call :meth:`update_filters` as the user types,
    and run mutations through the coordinator methods exposed here.
    """

    def __init__(
        self,
        store: SyncedCollectionStore[EntityT, FiltersT, StatsT],
        mutations: MutationCoordinator[EntityT, FiltersT, StatsT],
        debouncer: FilterDebouncer[EntityT, FiltersT, StatsT],
    ) -> None:
        self.store = store
        self.mutations = mutations
        self.debouncer = debouncer

    @property
    def collection(self) -> tuple[EntityT, ...]:
        return self.store.collection

    @property
    def statistics(self) -> StatsT:
        return self.store.statistics

    @property
    def filters(self) -> FiltersT:
        return self.store.filters

    @property
    def source(self) -> DataSource | None:
        return self.store.source

    @property
    def is_loading(self) -> bool:
        return self.store.is_loading

    @property
    def is_submitting(self) -> bool:
        return self.mutations.state is MutationState.SUBMITTING

    @property
    def connection_status(self) -> ConnectionStatus | None:
        return self.store.connection_status

    @property
    def last_error(self) -> ApiError | None:
        """Most recent error from either fetching or mutating."""
        errors = [e for e in (self.store.last_error, self.mutations.last_error) if e is not None]
        return max(errors, key=lambda e: e.timestamp) if errors else None

    @property
    def validation_errors(self) -> dict[str, str]:
        return self.mutations.validation_errors

    def get(self, entity_id: str | int) -> EntityT | None:
        return self.store.get(entity_id)

    async def refresh(self) -> FetchResult[EntityT, StatsT]:
        return await self.store.fetch(force=True)

    def update_filters(self, **changes: Any) -> FiltersT:
        """Replace the filter set and schedule a debounced fetch.

        The new filter set is adopted immediately so a burst of calls
        accumulates; only the last scheduled fetch runs.
        """
        filters = self.store.filters.replace(**changes)  # type: ignore[attr-defined]
        self.store.set_filters(filters)
        self.debouncer.schedule(filters)
        return filters

    async def create(self, payload: Any) -> bool:
        return await self.mutations.create(payload)

    async def update(self, entity_id: str | int, payload: Any) -> bool:
        return await self.mutations.update(entity_id, payload)

    async def delete(self, entity_id: str | int) -> bool:
        return await self.mutations.delete(entity_id)

    async def change_status(self, entity_id: str | int, status: str, reason: str | None = None) -> bool:
        return await self.mutations.change_status(entity_id, status, reason)

    async def assign(self, entity_id: str | int, manager: Any) -> bool:
        return await self.mutations.assign(entity_id, manager)

    async def unassign(self, entity_id: str | int) -> bool:
        return await self.mutations.unassign(entity_id)

    async def reset_password(self, entity_id: str | int, request: Any) -> bool:
        return await self.mutations.reset_password(entity_id, request)


class KtcClient:
    """Async client for the KTC Energy management backend.

    Usage::

        async with KtcClient(KtcConfig.from_env()) as client:
            stations = client.stations()
            await stations.refresh()
            stations.update_filters(status="ACTIVE")
    """

    def __init__(
        self,
        config: KtcConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        token_provider: TokenProvider | None = None,
        notifier: NotificationSink | None = None,
        connection: ConnectionStatusProvider | None = None,
    ) -> None:
        self._config = config or KtcConfig()
        self._external_session = session is not None
        self._http_session = session
        self._token_provider = token_provider
        self._notifier: NotificationSink = notifier or LoggingNotificationSink()
        self._connection_override = connection
        self._transport: Transport | None = None
        self._connection: ConnectionStatusProvider | None = None
        self._managers: dict[tuple[str, str], CollectionManager[Any, Any, Any]] = {}

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> KtcClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session, self._token_provider)
        self._connection = self._connection_override or ConnectionMonitor(
            self._config,
            self._http_session,
            self._token_provider,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        for manager in self._managers.values():
            manager.debouncer.cancel()
        self._managers.clear()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None
        self._connection = None

    @property
    def config(self) -> KtcConfig:
        return self._config

    @property
    def connection(self) -> ConnectionStatusProvider:
        if self._connection is None:
            raise KtcError("Client not initialized. Use 'async with KtcClient(...) as client:'")
        return self._connection

    async def check_connection(self) -> ConnectionStatus:
        """Probe the backend once."""
        return await self.connection.probe()

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def stations(self) -> CollectionManager[Station, StationFilters, StationStats]:
        return self._manager(("stations", ""), StationsResource, seeds.STATIONS)

    def users(self) -> CollectionManager[User, UserFilters, UserStats]:
        return self._manager(("users", ""), UsersResource, seeds.USERS)

    def washing_bay(
        self,
        station_id: str,
        station_name: str = "",
    ) -> CollectionManager[WashingBayEntry, WashingBayFilters, WashingBayStats]:
        return self._manager(
            ("washing_bay", station_id),
            lambda: WashingBayResource(station_id, station_name),
            seeds.WASHING_BAY_ENTRIES,
        )

    def _manager(
        self,
        key: tuple[str, str],
        factory: Callable[[], Resource[Any, Any, Any]],
        seed_data: Iterable[Mapping[str, Any]],
    ) -> CollectionManager[Any, Any, Any]:
        manager = self._managers.get(key)
        if manager is not None:
            return manager
        if self._transport is None:
            raise KtcError("Client not initialized. Use 'async with KtcClient(...) as client:'")

        resource = factory()
        repository: FallbackRepository[Any] = FallbackRepository(resource, seed_data)
        store: SyncedCollectionStore[Any, Any, Any] = SyncedCollectionStore(
            resource, self._transport, self.connection, repository, self._notifier
        )
        coordinator: MutationCoordinator[Any, Any, Any] = MutationCoordinator(
            store,
            self._transport,
            self.connection,
            repository,
            self._notifier,
            actor_name=self._config.actor_name,
        )
        debouncer: FilterDebouncer[Any, Any, Any] = FilterDebouncer(store, self._config.debounce_window)
        manager = CollectionManager(store, coordinator, debouncer)
        self._managers[key] = manager
        _logger.debug("Created %s manager", resource.name)
        return manager
