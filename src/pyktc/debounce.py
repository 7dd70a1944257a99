"""Coalesce bursts of filter changes into one forced fetch."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Generic

from pyktc._constants import DEFAULT_DEBOUNCE_WINDOW
from pyktc.models.common import EntityT, FetchResult, FiltersT, StatsT
from pyktc.store import SyncedCollectionStore

_logger = logging.getLogger(__name__)


class FilterDebouncer(Generic[EntityT, FiltersT, StatsT]):
    """Last-write-wins debouncer in front of :meth:`SyncedCollectionStore.fetch`.

    Holds a single timer handle. Each :meth:`schedule` cancels the pending
    handle and arms a new one; only a handle that survives its quiet
    window fires, with the most recently supplied filters.
    """

    def __init__(
        self,
        store: SyncedCollectionStore[EntityT, FiltersT, StatsT],
        quiet_window: float = DEFAULT_DEBOUNCE_WINDOW,
    ) -> None:
        self._store = store
        self._quiet_window = quiet_window
        self._handle: asyncio.TimerHandle | None = None
        self._latest: FiltersT | None = None
        self._task: asyncio.Task[FetchResult[EntityT, StatsT]] | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def last_task(self) -> asyncio.Task[FetchResult[EntityT, StatsT]] | None:
        return self._task

    def schedule(self, filters: FiltersT, quiet_window: float | None = None) -> None:
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._latest = filters
        delay = self._quiet_window if quiet_window is None else quiet_window
        self._handle = loop.call_later(delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._latest = None

    async def wait(self) -> FetchResult[EntityT, StatsT] | None:
        """Wait for the pending timer and the fetch it triggers."""
        loop = asyncio.get_running_loop()
        while self._handle is not None:
            await asyncio.sleep(max(self._handle.when() - loop.time(), 0))
            await asyncio.sleep(0)
        if self._task is None:
            return None
        return await self._task

    def _fire(self) -> None:
        self._handle = None
        filters, self._latest = self._latest, None
        if filters is None:
            return
        _logger.debug("Debounced %s fetch firing", self._store.resource.name)
        self._task = asyncio.get_running_loop().create_task(self._store.fetch(filters, force=True))
        self._task.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(task: asyncio.Task[Any]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.error("Debounced fetch failed", exc_info=exc)
