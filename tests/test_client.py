from __future__ import annotations

import pytest
from conftest import FakeHttpSession, FakeResponse

from pyktc import KtcClient, KtcConfig
from pyktc.connection import FixedConnectionProvider
from pyktc.exceptions import KtcError
from pyktc.models.common import DataSource
from pyktc.notify import RecordingNotificationSink

_STATIONS_BODY = '{"success": true, "data": [{"id": "tema-industrial", "name": "KTC Tema Industrial"}]}'


def _config() -> KtcConfig:
    return KtcConfig(base_url="http://backend.test/api", retry_delay=0.0, debounce_window=0.01)


@pytest.mark.asyncio
async def test_client_requires_context_manager() -> None:
    client = KtcClient(_config())

    with pytest.raises(KtcError, match="Client not initialized"):
        client.stations()


@pytest.mark.asyncio
async def test_external_session_is_not_closed() -> None:
    session = FakeHttpSession()

    async with KtcClient(_config(), session=session) as client:  # type: ignore[arg-type]
        assert client.stations() is client.stations()

    assert session.closed is False


@pytest.mark.asyncio
async def test_managers_are_cached_per_station() -> None:
    async with KtcClient(_config(), session=FakeHttpSession()) as client:  # type: ignore[arg-type]
        accra = client.washing_bay("accra-central")
        assert client.washing_bay("accra-central") is accra
        assert client.washing_bay("kumasi-highway") is not accra


@pytest.mark.asyncio
async def test_remote_then_fallback_after_backend_goes_down() -> None:
    session = FakeHttpSession(FakeResponse(200, _STATIONS_BODY))
    provider = FixedConnectionProvider(connected=True)
    notifier = RecordingNotificationSink()

    async with KtcClient(
        _config(),
        session=session,  # type: ignore[arg-type]
        connection=provider,
        notifier=notifier,
    ) as client:
        stations = client.stations()

        await stations.refresh()
        assert stations.source is DataSource.REMOTE
        assert [s.id for s in stations.collection] == ["tema-industrial"]
        assert session.requests[0]["url"] == "http://backend.test/api/stations"

        provider.connected = False
        stations.update_filters(status="active")
        await stations.debouncer.wait()

        assert stations.source is DataSource.FALLBACK
        assert [s.id for s in stations.collection] == ["accra-central", "kumasi-highway"]
        assert stations.connection_status is not None
        assert stations.connection_status.connected is False
        assert len(session.requests) == 1


@pytest.mark.asyncio
async def test_check_connection_uses_health_endpoint() -> None:
    session = FakeHttpSession(FakeResponse(200, '{"status": "UP"}'))

    async with KtcClient(_config(), session=session) as client:  # type: ignore[arg-type]
        status = await client.check_connection()

    assert status.connected is True
    assert session.requests[0]["url"] == "http://backend.test/api/health"


@pytest.mark.asyncio
async def test_fallback_repositories_are_isolated_per_client() -> None:
    provider = FixedConnectionProvider(connected=False)

    async with KtcClient(_config(), session=FakeHttpSession(), connection=provider) as first:  # type: ignore[arg-type]
        assert await first.stations().delete("accra-central") is True
        assert first.stations().get("accra-central") is None

    async with KtcClient(_config(), session=FakeHttpSession(), connection=provider) as second:  # type: ignore[arg-type]
        result = await second.stations().refresh()
        assert "accra-central" in {s.id for s in result.collection}
