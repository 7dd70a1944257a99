"""Canonical collection and statistics for one resource.

:class:`SyncedCollectionStore` decides per fetch whether to read the
backend or the fallback repository, and always replaces the collection
and its statistics together so both carry the same provenance.

Overlapping fetches are not sequenced: whichever completes last
overwrites the state, regardless of which was issued last.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Generic

from pyktc._transport import Transport
from pyktc.connection import ConnectionStatusProvider
from pyktc.exceptions import KtcError
from pyktc.fallback import FallbackRepository
from pyktc.models.common import (
    ApiError,
    ConnectionStatus,
    DataSource,
    EntityT,
    FetchResult,
    FiltersT,
    StatsT,
)
from pyktc.notify import LoggingNotificationSink, NotificationSink
from pyktc.resources._base import Resource

_logger = logging.getLogger(__name__)


class SyncedCollectionStore(Generic[EntityT, FiltersT, StatsT]):
    def __init__(
        self,
        resource: Resource[EntityT, FiltersT, StatsT],
        transport: Transport,
        connection: ConnectionStatusProvider,
        repository: FallbackRepository[EntityT],
        notifier: NotificationSink | None = None,
    ) -> None:
        self._resource = resource
        self._transport = transport
        self._connection = connection
        self._repository = repository
        self._notifier: NotificationSink = notifier or LoggingNotificationSink()

        self._filters: FiltersT = resource.default_filters()
        self._collection: tuple[EntityT, ...] = ()
        self._statistics: StatsT = resource.compute_stats([])
        self._source: DataSource | None = None
        self._last_signature: str | None = None
        self._last_error: ApiError | None = None
        self._loading = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def resource(self) -> Resource[EntityT, FiltersT, StatsT]:
        return self._resource

    @property
    def collection(self) -> tuple[EntityT, ...]:
        return self._collection

    @property
    def statistics(self) -> StatsT:
        return self._statistics

    @property
    def source(self) -> DataSource | None:
        """Provenance of the current collection; ``None`` before the first fetch."""
        return self._source

    @property
    def filters(self) -> FiltersT:
        return self._filters

    @property
    def last_error(self) -> ApiError | None:
        return self._last_error

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def connection_status(self) -> ConnectionStatus | None:
        return self._connection.status

    def set_filters(self, filters: FiltersT) -> None:
        """Replace the filter set without fetching."""
        self._filters = filters

    def get(self, entity_id: str | int) -> EntityT | None:
        wanted = str(entity_id)
        for entity in self._collection:
            if self._resource.entity_id(entity) == wanted:
                return entity
        return None

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def fetch(self, filters: FiltersT | None = None, *, force: bool = False) -> FetchResult[EntityT, StatsT]:
        """Refresh the collection for *filters* (default: the current filters).

        Unless *force* is set, a fetch whose filter signature equals the
        last fetched one returns the current state with ``skipped=True``.
        """
        if filters is not None:
            self._filters = filters
        filters = self._filters

        signature = filters.signature()  # type: ignore[attr-defined]
        if not force and signature == self._last_signature:
            _logger.debug("Skipping duplicate %s fetch", self._resource.name)
            return self._result(skipped=True)
        # Recorded before any awaited work, so a concurrent duplicate is suppressed too.
        self._last_signature = signature
        self._loading = True

        try:
            status = await self._connection.probe()
            error: ApiError | None = None

            if status.connected:
                try:
                    collection, statistics = await self._fetch_remote(filters)
                except KtcError as exc:
                    error = ApiError.from_exception(self._resource.fetch_error_code, exc)
                    self._last_error = error
                    _logger.warning("Fetching %s failed, using fallback data: %s", self._resource.name, exc)
                    self._notifier.error(
                        f"Failed to fetch {self._resource.name} data",
                        "Using offline data. Please check your connection.",
                    )
                else:
                    self._last_error = None
                    self._commit(collection, statistics, DataSource.REMOTE)
                    return self._result(connection=status)
            else:
                _logger.info("Backend unreachable, using fallback %s data", self._resource.name)

            collection = self._repository.list(filters)
            self._commit(collection, self._resource.compute_stats(collection), DataSource.FALLBACK)
            return self._result(error=error, connection=status)
        finally:
            self._loading = False

    async def _fetch_remote(self, filters: FiltersT) -> tuple[list[EntityT], StatsT]:
        response = await self._transport.call(
            self._resource.list_endpoint(),
            "GET",
            params=filters.to_query_params(),  # type: ignore[attr-defined]
        )
        collection, statistics = self._resource.parse_list(response.body)
        if statistics is None:
            statistics = self._resource.compute_stats(collection)
        _logger.debug("Fetched %d %s from backend", len(collection), self._resource.name)
        return collection, statistics

    def apply_local(self, collection: Sequence[EntityT]) -> FetchResult[EntityT, StatsT]:
        """Replace the collection from fallback data and recompute statistics."""
        self._commit(collection, self._resource.compute_stats(collection), DataSource.FALLBACK)
        return self._result()

    def _commit(self, collection: Sequence[EntityT], statistics: StatsT, source: DataSource) -> None:
        self._collection = tuple(collection)
        self._statistics = statistics
        self._source = source

    def _result(
        self,
        *,
        error: ApiError | None = None,
        skipped: bool = False,
        connection: ConnectionStatus | None = None,
    ) -> FetchResult[EntityT, StatsT]:
        return FetchResult(
            collection=self._collection,
            statistics=self._statistics,
            source=self._source or DataSource.FALLBACK,
            filters=self._filters,
            error=error,
            skipped=skipped,
            connection=connection or self._connection.status,
        )
