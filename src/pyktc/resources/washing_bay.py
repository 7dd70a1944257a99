"""Washing-bay ledger resource, scoped to a single station."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, ClassVar

from pydantic import BaseModel

from pyktc.filters import WashingBayFilters, contains_text, is_constrained
from pyktc.models.common import MutationKind, utcnow
from pyktc.models.washing_bay import (
    KodsonStatus,
    WashingBayEntry,
    WashingBayEntryForm,
    WashingBayStats,
    derive_amounts,
)
from pyktc.resources._base import Resource, Route
from pyktc.validation import missing_fields

_CAMEL_AMOUNTS = {
    "total_sale": "totalSale",
    "washing_bay_commission": "washingBayCommission",
    "washing_bay_commission_rate": "washingBayCommissionRate",
    "company_commission": "companyCommission",
    "bank_deposit": "bankDeposit",
    "balancing": "balancing",
}


class WashingBayResource(Resource[WashingBayEntry, WashingBayFilters, WashingBayStats]):
    name = "washing bay entries"
    label = "washing bay entry"
    error_code = "ENTRY"
    fetch_error_code = "FETCH_WASHING_BAY_ERROR"

    entity_type = WashingBayEntry
    filters_type = WashingBayFilters
    stats_type = WashingBayStats

    list_route = Route("GET", "/washingBay/station/{station}")
    routes: ClassVar = {
        MutationKind.CREATE: Route("POST", "/washingBay"),
        MutationKind.UPDATE: Route("PUT", "/washingBay/entries/{id}"),
        MutationKind.DELETE: Route("DELETE", "/washingBay/entries/{id}"),
    }
    payload_types: ClassVar = {
        MutationKind.CREATE: WashingBayEntryForm,
        MutationKind.UPDATE: WashingBayEntryForm,
    }

    def __init__(self, station_id: str, station_name: str = "") -> None:
        self.station_id = station_id
        self.station_name = station_name

    def list_endpoint(self) -> str:
        return self.list_route.render(station=self.station_id)

    def matches(self, entity: WashingBayEntry, filters: WashingBayFilters) -> bool:
        if entity.station_id != self.station_id:
            return False
        if is_constrained(filters.status) and entity.kodson_status.value.casefold() != filters.status.casefold():
            return False
        if is_constrained(filters.search, free_text=True) and not contains_text(
            filters.search, entity.date, entity.kodson_status.value, entity.created_by
        ):
            return False
        return True

    def validate(self, kind: MutationKind, form: BaseModel | None) -> dict[str, str]:
        if not isinstance(form, WashingBayEntryForm):
            return {}
        errors = missing_fields(form, "date")
        if form.no_of_vehicles < 0:
            errors["no_of_vehicles"] = "Number of vehicles cannot be negative"
        if form.price_per_vehicle < 0:
            errors["price_per_vehicle"] = "Price per vehicle cannot be negative"
        if not 0 <= form.washing_bay_commission_rate <= 100:
            errors["washing_bay_commission_rate"] = "Commission rate must be between 0 and 100"
        return errors

    def request_body(
        self,
        kind: MutationKind,
        form: BaseModel | None,
        target_id: str | None,
        actor: str,
    ) -> dict[str, Any] | None:
        if not isinstance(form, WashingBayEntryForm):
            return None
        amounts = {_CAMEL_AMOUNTS[key]: value for key, value in derive_amounts(form).items()}
        body = {**form.to_wire(), **amounts}
        if kind is MutationKind.CREATE:
            body.update(stationId=self.station_id, createdBy=actor)
        else:
            body.update(id=int(target_id) if target_id and target_id.isdigit() else target_id, updatedBy=actor)
        return body

    def build_created(
        self,
        form: WashingBayEntryForm,
        existing: Sequence[WashingBayEntry],
        actor: str,
    ) -> WashingBayEntry:
        return WashingBayEntry(
            id=max((e.id for e in existing), default=0) + 1,
            date=form.date,
            no_of_vehicles=form.no_of_vehicles,
            price_per_vehicle=form.price_per_vehicle,
            expenses=form.expenses,
            kodson_status=KodsonStatus.PENDING,
            station_id=self.station_id,
            station_name=self.station_name,
            created_by=actor,
            notes=form.notes,
            **derive_amounts(form),
        )

    def apply_update(self, entity: WashingBayEntry, form: WashingBayEntryForm, actor: str) -> WashingBayEntry:
        return entity.model_copy(
            update={
                "date": form.date,
                "no_of_vehicles": form.no_of_vehicles,
                "price_per_vehicle": form.price_per_vehicle,
                "expenses": form.expenses,
                "notes": form.notes,
                "updated_by": actor,
                "updated_at": utcnow(),
                **derive_amounts(form),
            }
        )
