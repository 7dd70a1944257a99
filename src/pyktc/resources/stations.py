"""Stations resource."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, ClassVar

from pydantic import BaseModel

from pyktc.exceptions import KtcValidationError
from pyktc.filters import StationFilters, contains_text, is_constrained, yes_no_matches
from pyktc.models.common import MutationKind, StatusChange, utcnow
from pyktc.models.station import (
    AccountStatus,
    ManagerAssignment,
    PasswordReset,
    Station,
    StationContact,
    StationFinancial,
    StationLocation,
    StationManagerContact,
    StationOperational,
    StationForm,
    StationStats,
    StationStatus,
)
from pyktc.resources._base import Resource, Route, unique_id
from pyktc.validation import missing_fields

#: Financial defaults applied to stations created while offline.
OFFLINE_COMMISSION_RATE = 2.5
OFFLINE_SECURITY_DEPOSIT = 25000.0


class StationsResource(Resource[Station, StationFilters, StationStats]):
    name = "stations"
    label = "station"
    error_code = "STATION"
    fetch_error_code = "FETCH_STATIONS_ERROR"

    entity_type = Station
    filters_type = StationFilters
    stats_type = StationStats

    list_route = Route("GET", "/stations")
    routes: ClassVar = {
        MutationKind.CREATE: Route("POST", "/stations"),
        MutationKind.UPDATE: Route("PUT", "/stations/{id}/update"),
        MutationKind.DELETE: Route("DELETE", "/stations/{id}/delete"),
        MutationKind.STATUS_CHANGE: Route("PUT", "/stations/{id}/deactivate"),
        MutationKind.ASSIGN: Route("POST", "/stations/assign/{id}"),
        MutationKind.UNASSIGN: Route("POST", "/stations/unassign/{id}"),
        MutationKind.RESET_PASSWORD: Route("POST", "/stations/{id}/reset-password"),
    }
    activate_route = Route("PUT", "/stations/{id}/activate")
    payload_types: ClassVar = {
        MutationKind.CREATE: StationForm,
        MutationKind.UPDATE: StationForm,
        MutationKind.STATUS_CHANGE: StatusChange,
        MutationKind.ASSIGN: ManagerAssignment,
        MutationKind.RESET_PASSWORD: PasswordReset,
    }

    def matches(self, entity: Station, filters: StationFilters) -> bool:
        if is_constrained(filters.status) and entity.operational.status.value != filters.status.upper():
            return False
        if is_constrained(filters.user_status) and (
            entity.user is None or entity.user.status.value != filters.user_status.upper()
        ):
            return False
        if is_constrained(filters.region) and entity.location.region.casefold() != filters.region.casefold():
            return False
        if is_constrained(filters.has_manager) and not yes_no_matches(filters.has_manager, entity.has_manager):
            return False
        if is_constrained(filters.needs_password_reset) and (
            entity.user is None or not yes_no_matches(filters.needs_password_reset, entity.user.must_change_password)
        ):
            return False
        if is_constrained(filters.search, free_text=True) and not contains_text(
            filters.search,
            entity.name,
            entity.code,
            entity.location.city,
            entity.location.region,
            entity.user.username if entity.user is not None else None,
        ):
            return False
        return True

    def validate(self, kind: MutationKind, form: BaseModel | None) -> dict[str, str]:
        if isinstance(form, StationForm):
            return missing_fields(form, "name", "code", "phone", "email")
        if isinstance(form, PasswordReset):
            errors = missing_fields(form, "new_password")
            if form.new_password != form.confirm_password:
                errors["confirm_password"] = "New password and confirmation do not match"
            return errors
        if isinstance(form, ManagerAssignment):
            return missing_fields(form, "manager", "manager_user_id")
        if isinstance(form, StatusChange) and StationStatus(form.status) is StationStatus.UNKNOWN:
            return {"status": f"Unknown station status: {form.status}"}
        return {}

    def route_for(self, kind: MutationKind, target_id: str | None, form: BaseModel | None) -> tuple[str, str]:
        if kind is MutationKind.STATUS_CHANGE and isinstance(form, StatusChange):
            if StationStatus(form.status) is StationStatus.ACTIVE:
                return self.activate_route.method, self.activate_route.render(id=target_id)
        return super().route_for(kind, target_id, form)

    def request_body(
        self,
        kind: MutationKind,
        form: BaseModel | None,
        target_id: str | None,
        actor: str,
    ) -> dict[str, Any] | None:
        if isinstance(form, StationForm):
            key = "createdBy" if kind is MutationKind.CREATE else "lastModifiedBy"
            return {**form.to_wire(), key: actor}
        if isinstance(form, StatusChange):
            return {"status": StationStatus(form.status).value}
        if isinstance(form, ManagerAssignment):
            return {"managerDetails": form.to_wire(), "assignedBy": actor}
        if isinstance(form, PasswordReset):
            return {**form.to_wire(), "stationId": target_id, "requestedBy": actor}
        return None

    def build_created(self, form: StationForm, existing: Sequence[Station], actor: str) -> Station:
        # Stations created offline have no login account until one is assigned.
        return Station(
            id=unique_id("station", (s.id for s in existing)),
            name=form.name,
            code=form.code,
            location=StationLocation(address=form.address, city=form.city, region=form.region),
            contact=StationContact(phone=form.phone, email=form.email),
            operational=StationOperational(
                status=StationStatus.ACTIVE,
                operating_hours=form.operating_hours,
                fuel_types=list(form.fuel_types),
                tank_capacity=dict(form.tank_capacity),
                pump_count=form.pump_count,
            ),
            financial=StationFinancial(
                monthly_target=form.monthly_target,
                commission_rate=OFFLINE_COMMISSION_RATE,
                security_deposit=OFFLINE_SECURITY_DEPOSIT,
            ),
            created_by=actor,
            created_at=utcnow(),
            notes=form.notes,
        )

    def apply_update(self, entity: Station, form: StationForm, actor: str) -> Station:
        return entity.model_copy(
            update={
                "name": form.name,
                "code": form.code,
                "location": StationLocation(address=form.address, city=form.city, region=form.region),
                "contact": StationContact(phone=form.phone, email=form.email, manager=entity.contact.manager),
                "operational": entity.operational.model_copy(
                    update={
                        "operating_hours": form.operating_hours,
                        "fuel_types": list(form.fuel_types),
                        "tank_capacity": dict(form.tank_capacity),
                        "pump_count": form.pump_count,
                    }
                ),
                "financial": entity.financial.model_copy(update={"monthly_target": form.monthly_target}),
                "notes": form.notes,
                **_modified(actor),
            }
        )

    def apply_status(self, entity: Station, change: StatusChange, actor: str) -> Station:
        status = StationStatus(change.status)
        update: dict[str, Any] = {
            "operational": entity.operational.model_copy(update={"status": status}),
            **_modified(actor),
        }
        if entity.user is not None:
            # The station login follows the station: only ACTIVE stays active.
            account_status = AccountStatus.ACTIVE if status is StationStatus.ACTIVE else AccountStatus.INACTIVE
            update["user"] = entity.user.model_copy(update={"status": account_status})
        return entity.model_copy(update=update)

    def apply_assign(self, entity: Station, form: ManagerAssignment, actor: str) -> Station:
        manager = StationManagerContact(
            name=form.manager,
            email=form.manager_email,
            phone=form.manager_phone,
            user_id=form.manager_user_id,
            assigned_at=utcnow(),
            assigned_by=actor,
        )
        return entity.model_copy(
            update={"contact": entity.contact.model_copy(update={"manager": manager}), **_modified(actor)}
        )

    def apply_unassign(self, entity: Station, actor: str) -> Station:
        if entity.contact.manager is None:
            raise KtcValidationError("No manager assigned to this station", errors={"manager": "not assigned"})
        return entity.model_copy(
            update={"contact": entity.contact.model_copy(update={"manager": None}), **_modified(actor)}
        )

    def apply_password_reset(self, entity: Station, form: PasswordReset, actor: str) -> Station:
        if entity.user is None:
            raise KtcValidationError("Station has no associated user account", errors={"user": "missing"})
        now = utcnow()
        account = entity.user.model_copy(
            update={
                "password_changed": True,
                "must_change_password": form.must_change_password,
                "last_modified_at": now,
            }
        )
        return entity.model_copy(update={"user": account, "last_modified_by": actor, "last_modified_at": now})


def _modified(actor: str) -> dict[str, Any]:
    return {"last_modified_by": actor, "last_modified_at": utcnow()}
