from __future__ import annotations

import asyncio
from typing import Any

import pytest
from conftest import FakeTransport

from pyktc.connection import FixedConnectionProvider
from pyktc.exceptions import KtcApiError, KtcConfigError
from pyktc.fallback import FallbackRepository, seeds
from pyktc.filters import StationFilters
from pyktc.models.common import DataSource, MutationKind, MutationState
from pyktc.models.station import AccountStatus, StationStatus
from pyktc.models.user import UserRole
from pyktc.mutations import MutationCoordinator
from pyktc.notify import RecordingNotificationSink
from pyktc.resources import StationsResource, UsersResource, WashingBayResource
from pyktc.store import SyncedCollectionStore

_STATION_FORM = {
    "name": "KTC Cape Coast",
    "code": "KTC-CPC-01",
    "city": "Cape Coast",
    "region": "Central",
    "phone": "+233 24 555 0101",
    "email": "cape.coast@ktcenergy.com.gh",
    "monthlyTarget": 250000,
}
_STRONG_PASSWORD = "Str0ng!Pass"


def _build(
    resource: Any,
    seed: Any,
    transport: FakeTransport,
    connection: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> tuple[SyncedCollectionStore, MutationCoordinator]:
    repository = FallbackRepository(resource, seed)
    store = SyncedCollectionStore(resource, transport, connection, repository, notifier)
    coordinator = MutationCoordinator(store, transport, connection, repository, notifier, actor_name="Mary Asante")
    return store, coordinator


def _stations(
    transport: FakeTransport,
    connection: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> tuple[SyncedCollectionStore, MutationCoordinator]:
    return _build(StationsResource(), seeds.STATIONS, transport, connection, notifier)


# ----------------------------------------------------------------------
# Single flight
# ----------------------------------------------------------------------


_SECOND_CALLS = {
    MutationKind.CREATE: lambda c: c.create(_STATION_FORM),
    MutationKind.UPDATE: lambda c: c.update("accra-central", _STATION_FORM),
    MutationKind.DELETE: lambda c: c.delete("accra-central"),
    MutationKind.STATUS_CHANGE: lambda c: c.change_status("accra-central", "INACTIVE"),
    MutationKind.ASSIGN: lambda c: c.assign("takoradi-port", {"manager": "Ama Yeboah", "managerUserId": "user-007"}),
    MutationKind.UNASSIGN: lambda c: c.unassign("accra-central"),
    MutationKind.RESET_PASSWORD: lambda c: c.reset_password(
        "accra-central", {"newPassword": "secret", "confirmPassword": "secret"}
    ),
}


@pytest.mark.parametrize("kind", list(_SECOND_CALLS))
@pytest.mark.asyncio
async def test_second_mutation_is_refused_while_one_is_submitting(
    kind: MutationKind,
    online: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    transport = FakeTransport(lambda *_: {"success": True, "data": []}, delay=0.05)
    _, coordinator = _stations(transport, online, notifier)

    first = asyncio.create_task(coordinator.create(_STATION_FORM))
    await asyncio.sleep(0.01)
    assert coordinator.state is MutationState.SUBMITTING
    assert coordinator.in_flight is not None
    assert coordinator.in_flight.kind is MutationKind.CREATE

    refused = await _SECOND_CALLS[kind](coordinator)

    assert refused is False
    assert await first is True
    assert coordinator.state is MutationState.IDLE
    assert transport.calls_to("POST") == ["/stations"]


@pytest.mark.asyncio
async def test_in_flight_intent_masks_passwords(
    online: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    transport = FakeTransport(lambda *_: {"success": True, "data": []}, delay=0.05)
    _, coordinator = _stations(transport, online, notifier)

    task = asyncio.create_task(
        coordinator.reset_password(
            "accra-central",
            {"newPassword": _STRONG_PASSWORD, "confirmPassword": _STRONG_PASSWORD, "mustChangePassword": True},
        )
    )
    await asyncio.sleep(0.01)
    intent = coordinator.in_flight

    assert intent is not None
    assert intent.kind is MutationKind.RESET_PASSWORD
    assert intent.payload["newPassword"] == "<redacted>"
    assert intent.payload["confirmPassword"] == "<redacted>"
    assert intent.payload["mustChangePassword"] is True
    assert _STRONG_PASSWORD not in repr(intent)

    assert await task is True
    _, endpoint, body, _ = transport.calls[0]
    assert endpoint == "/stations/accra-central/reset-password"
    assert body is not None and _STRONG_PASSWORD in body.values()


@pytest.mark.asyncio
async def test_delete_during_create_leaves_collection_unchanged(
    offline: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    gate = asyncio.Event()

    class _SlowProvider(FixedConnectionProvider):
        async def probe(self):  # type: ignore[override]
            await gate.wait()
            return await super().probe()

    connection = _SlowProvider(connected=False)
    store, coordinator = _stations(FakeTransport(), connection, notifier)
    gate.set()
    await store.fetch()
    before = store.collection
    gate.clear()

    create = asyncio.create_task(coordinator.create(_STATION_FORM))
    await asyncio.sleep(0)

    assert await coordinator.delete("accra-central") is False
    assert store.collection == before

    gate.set()
    assert await create is True
    assert store.get("accra-central") is not None


@pytest.mark.asyncio
async def test_unsupported_kind_raises_config_error(
    online: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    _, coordinator = _build(
        WashingBayResource("accra-central"), seeds.WASHING_BAY_ENTRIES, FakeTransport(), online, notifier
    )

    with pytest.raises(KtcConfigError):
        await coordinator.assign(1, {"manager": "x", "managerUserId": "y"})
    assert coordinator.state is MutationState.IDLE


# ----------------------------------------------------------------------
# Remote path
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_remote_create_refetches_instead_of_merging(
    online: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    created = {"id": "cape-coast", "name": "KTC Cape Coast", "code": "KTC-CPC-01"}

    def _backend(method: str, endpoint: str, body: Any, params: Any) -> dict[str, Any]:
        if method == "POST":
            return {"success": True, "message": "Station created", "data": created}
        return {"success": True, "data": [created]}

    transport = FakeTransport(_backend)
    store, coordinator = _stations(transport, online, notifier)

    assert await coordinator.create(_STATION_FORM) is True

    assert [s.id for s in store.collection] == ["cape-coast"]
    assert store.source is DataSource.REMOTE
    method, endpoint, body, _ = transport.calls[0]
    assert (method, endpoint) == ("POST", "/stations")
    assert body["createdBy"] == "Mary Asante"
    assert body["monthlyTarget"] == 250000
    assert transport.calls[1][:2] == ("GET", "/stations")
    assert notifier.notifications[0].title == "Station created successfully!"
    assert notifier.notifications[0].description == "Station created"


@pytest.mark.asyncio
async def test_remote_failure_records_error_and_notifies(
    online: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    transport = FakeTransport(lambda *_: KtcApiError("API Error: 409 - Conflict", code="HTTP_409"))
    store, coordinator = _stations(transport, online, notifier)

    assert await coordinator.update("accra-central", _STATION_FORM) is False

    assert coordinator.last_error is not None
    assert coordinator.last_error.code == "UPDATE_STATION_ERROR"
    assert coordinator.last_error.related_id == "accra-central"
    assert notifier.titles("error") == ["Failed to update station"]
    assert len(transport.calls) == 1
    assert store.source is None


@pytest.mark.parametrize(
    ("status", "endpoint"),
    [("ACTIVE", "/stations/s1/activate"), ("INACTIVE", "/stations/s1/deactivate")],
)
@pytest.mark.asyncio
async def test_station_status_routes(
    status: str,
    endpoint: str,
    online: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    transport = FakeTransport()
    _, coordinator = _stations(transport, online, notifier)

    assert await coordinator.change_status("s1", status) is True

    assert transport.calls[0][:3] == ("PUT", endpoint, {"status": status})


@pytest.mark.asyncio
async def test_washing_bay_update_sends_derived_amounts(
    online: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    transport = FakeTransport()
    _, coordinator = _build(
        WashingBayResource("accra-central"), seeds.WASHING_BAY_ENTRIES, transport, online, notifier
    )

    form = {"date": "Dec 5, 2024", "noOfVehicles": "10", "pricePerVehicle": "100", "washingBayCommissionRate": 20}
    assert await coordinator.update(3, form) is True

    method, endpoint, body, _ = transport.calls[0]
    assert (method, endpoint) == ("PUT", "/washingBay/entries/3")
    assert body["id"] == 3
    assert body["totalSale"] == 1000
    assert body["washingBayCommission"] == 200
    assert body["updatedBy"] == "Mary Asante"
    assert transport.calls[1][:2] == ("GET", "/washingBay/station/accra-central")


# ----------------------------------------------------------------------
# Validation
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_validation_failure_blocks_network(
    online: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    transport = FakeTransport()
    _, coordinator = _stations(transport, online, notifier)

    assert await coordinator.create({"name": "No code"}) is False

    assert set(coordinator.validation_errors) == {"code", "phone", "email"}
    assert transport.calls == []
    assert online.probe_count == 0
    assert notifier.titles("error") == ["Validation failed"]


@pytest.mark.asyncio
async def test_weak_user_password_is_rejected(
    online: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    transport = FakeTransport()
    _, coordinator = _build(UsersResource(), seeds.USERS, transport, online, notifier)

    ok = await coordinator.create(
        {"username": "new.user", "email": "n@ktc.com", "phone": "+233", "password": "password"}
    )

    assert ok is False
    assert "password" in coordinator.validation_errors
    assert transport.calls == []


@pytest.mark.asyncio
async def test_uncoercible_payload_reports_validation_errors(
    online: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    _, coordinator = _build(
        WashingBayResource("accra-central"), seeds.WASHING_BAY_ENTRIES, FakeTransport(), online, notifier
    )

    assert await coordinator.create({"date": "Dec 5, 2024", "noOfVehicles": "many"}) is False
    assert "noOfVehicles" in coordinator.validation_errors


# ----------------------------------------------------------------------
# Fallback path
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_offline_create_adds_to_fallback(
    offline: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    store, coordinator = _stations(FakeTransport(), offline, notifier)
    await store.fetch()

    assert await coordinator.create(_STATION_FORM) is True

    created = next(s for s in store.collection if s.code == "KTC-CPC-01")
    assert created.id.startswith("station-")
    assert created.financial.commission_rate == 2.5
    assert created.financial.security_deposit == 25000
    assert created.user is None
    assert created.created_by == "Mary Asante"
    assert store.statistics.total_stations == 4
    assert store.source is DataSource.FALLBACK
    assert notifier.titles("success") == ["Station created successfully! (offline)"]


@pytest.mark.asyncio
async def test_offline_mutation_respects_current_filters(
    offline: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    store, coordinator = _stations(FakeTransport(), offline, notifier)
    await store.fetch(StationFilters(status="ACTIVE"))

    assert await coordinator.change_status("kumasi-highway", "MAINTENANCE") is True

    assert [s.id for s in store.collection] == ["accra-central"]
    assert store.statistics.active_stations == 1


@pytest.mark.asyncio
async def test_offline_status_change_follows_station_user(
    offline: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    store, coordinator = _stations(FakeTransport(), offline, notifier)

    assert await coordinator.change_status("accra-central", "SUSPENDED") is True

    station = store.get("accra-central")
    assert station is not None
    assert station.operational.status is StationStatus.SUSPENDED
    assert station.user is not None
    assert station.user.status is AccountStatus.INACTIVE


@pytest.mark.asyncio
async def test_offline_unassign_without_manager_fails(
    offline: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    store, coordinator = _stations(FakeTransport(), offline, notifier)

    assert await coordinator.unassign("takoradi-port") is False

    assert coordinator.last_error is not None
    assert coordinator.last_error.code == "UNASSIGN_MANAGER_ERROR"
    assert notifier.titles("error") == ["No manager assigned to this station"]


@pytest.mark.asyncio
async def test_offline_assign_then_unassign(
    offline: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    store, coordinator = _stations(FakeTransport(), offline, notifier)

    assignment = {"manager": "Ama Yeboah", "managerEmail": "ama.yeboah@ktcenergy.com.gh", "managerUserId": "user-007"}
    assert await coordinator.assign("takoradi-port", assignment) is True
    station = store.get("takoradi-port")
    assert station is not None and station.contact.manager is not None
    assert station.contact.manager.user_id == "user-007"
    assert station.contact.manager.assigned_by == "Mary Asante"

    assert await coordinator.unassign("takoradi-port") is True
    station = store.get("takoradi-port")
    assert station is not None and station.contact.manager is None


@pytest.mark.asyncio
async def test_offline_station_password_reset(
    offline: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    store, coordinator = _stations(FakeTransport(), offline, notifier)

    ok = await coordinator.reset_password(
        "takoradi-port",
        {"newPassword": "temp1234", "confirmPassword": "temp1234", "mustChangePassword": False},
    )

    assert ok is True
    station = store.get("takoradi-port")
    assert station is not None and station.user is not None
    assert station.user.password_changed is True
    assert station.user.must_change_password is False
    assert store.statistics.users_needing_password_reset == 0


@pytest.mark.asyncio
async def test_offline_reset_without_account_fails(
    offline: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    store, coordinator = _stations(FakeTransport(), offline, notifier)
    assert await coordinator.create(_STATION_FORM) is True
    created = next(s for s in store.collection if s.code == "KTC-CPC-01")
    notifier.clear()

    ok = await coordinator.reset_password(created.id, {"newPassword": "abc", "confirmPassword": "abc"})

    assert ok is False
    assert notifier.titles("error") == ["Station has no associated user account"]
    assert coordinator.last_error is not None
    assert coordinator.last_error.code == "RESET_PASSWORD_ERROR"


@pytest.mark.asyncio
async def test_offline_delete_of_missing_entity_fails(
    offline: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    _, coordinator = _stations(FakeTransport(), offline, notifier)

    assert await coordinator.delete("nowhere") is False
    assert notifier.titles("error") == ["Station not found"]


@pytest.mark.asyncio
async def test_offline_user_create(
    offline: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    store, coordinator = _build(UsersResource(), seeds.USERS, FakeTransport(), offline, notifier)

    ok = await coordinator.create(
        {
            "username": "yaw",
            "email": "yaw@ktcenergy.com.gh",
            "phone": "+233 24 000 0000",
            "password": _STRONG_PASSWORD,
            "role": "admin",
            "isNonLocked": False,
        }
    )

    assert ok is True
    user = next(u for u in store.collection if u.username == "yaw")
    assert user.full_name == "yaw User"
    assert user.role is UserRole.ADMIN
    assert user.account_locked is True
    assert store.statistics.total_users == 9


@pytest.mark.asyncio
async def test_offline_washing_bay_create_uses_next_numeric_id(
    offline: FixedConnectionProvider,
    notifier: RecordingNotificationSink,
) -> None:
    store, coordinator = _build(
        WashingBayResource("kumasi-highway", "KTC Kumasi Highway"),
        seeds.WASHING_BAY_ENTRIES,
        FakeTransport(),
        offline,
        notifier,
    )

    form = {"date": "Dec 6, 2024", "noOfVehicles": 20, "pricePerVehicle": 50, "washingBayCommissionRate": 10}
    assert await coordinator.create(form) is True

    assert [e.id for e in store.collection] == [5, 7]
    entry = store.get(7)
    assert entry is not None
    assert entry.total_sale == 1000
    assert entry.washing_bay_commission == 100
    assert entry.station_name == "KTC Kumasi Highway"
