"""Backend reachability probing.

Stores and mutation coordinators ask one injected
:class:`ConnectionStatusProvider` before every operation. The production
provider is :class:`ConnectionMonitor`, which issues a single timed GET
to the health endpoint and never retries. :class:`FixedConnectionProvider`
pins the answer, for tests and for a forced offline mode.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Protocol

import aiohttp

from pyktc._constants import USER_AGENT
from pyktc._transport import TokenProvider
from pyktc.config import KtcConfig
from pyktc.exceptions import KtcConnectivityError
from pyktc.models.common import ConnectionStatus, utcnow

_logger = logging.getLogger(__name__)


class ConnectionStatusProvider(Protocol):
    """Single source of truth for backend reachability."""

    @property
    def status(self) -> ConnectionStatus | None: ...

    async def probe(self) -> ConnectionStatus: ...


class ConnectionMonitor:
    """Health-probe based :class:`ConnectionStatusProvider`."""

    def __init__(
        self,
        config: KtcConfig,
        http_session: aiohttp.ClientSession,
        token_provider: TokenProvider | None = None,
    ) -> None:
        self._config = config
        self._http = http_session
        self._token_provider: TokenProvider = token_provider or (lambda: config.token)
        self._status: ConnectionStatus | None = None

    @property
    def endpoint(self) -> str:
        return f"{self._config.base_url}{self._config.health_endpoint}"

    @property
    def status(self) -> ConnectionStatus | None:
        """Result of the most recent probe, or ``None`` before the first one."""
        return self._status

    async def probe(self) -> ConnectionStatus:
        """Issue one health check and return a fresh status."""
        headers = {"accept": "application/json", "user-agent": USER_AGENT}
        token = self._token_provider()
        if token:
            headers["authorization"] = f"Bearer {token}"

        started = time.monotonic()
        try:
            async with asyncio.timeout(self._config.timeout):
                async with self._http.request("GET", self.endpoint, headers=headers) as resp:
                    status_code = resp.status
            if not 200 <= status_code < 300:
                raise KtcConnectivityError(f"Health check returned HTTP {status_code}")
        except TimeoutError:
            status = self._disconnected(f"Health check timed out after {self._config.timeout}s")
        except aiohttp.ClientError as exc:
            status = self._disconnected(f"Health check failed: {exc}")
        except KtcConnectivityError as exc:
            status = self._disconnected(str(exc))
        else:
            now = utcnow()
            status = ConnectionStatus(
                connected=True,
                last_checked=now,
                endpoint=self.endpoint,
                response_time_ms=round((time.monotonic() - started) * 1000, 1),
                last_sync_time=now,
            )

        previous = self._status
        if previous is not None and previous.connected != status.connected:
            _logger.info(
                "Backend %s: %s",
                "reachable again" if status.connected else "unreachable, using fallback data",
                status.error or self.endpoint,
            )
        self._status = status
        return status

    def _disconnected(self, error: str) -> ConnectionStatus:
        _logger.debug("Probe of %s failed: %s", self.endpoint, error)
        # A failed probe keeps the time of the last successful sync.
        last_sync = self._status.last_sync_time if self._status is not None else None
        return ConnectionStatus(
            connected=False,
            endpoint=self.endpoint,
            last_sync_time=last_sync,
            error=error,
        )


class FixedConnectionProvider:
    """Provider whose answer is set by the caller.

    ``connected`` may be flipped at any time; each :meth:`probe` reports
    the current value and counts the call in :attr:`probe_count`.
    """

    def __init__(self, connected: bool = True, *, endpoint: str = "fixed://health") -> None:
        self.connected = connected
        self.endpoint = endpoint
        self.probe_count = 0
        self._status: ConnectionStatus | None = None

    @property
    def status(self) -> ConnectionStatus | None:
        return self._status

    async def probe(self) -> ConnectionStatus:
        self.probe_count += 1
        now = utcnow()
        if self.connected:
            self._status = ConnectionStatus(
                connected=True,
                last_checked=now,
                endpoint=self.endpoint,
                response_time_ms=0.0,
                last_sync_time=now,
            )
        else:
            self._status = ConnectionStatus(
                connected=False,
                last_checked=now,
                endpoint=self.endpoint,
                error="Backend marked offline",
            )
        return self._status
