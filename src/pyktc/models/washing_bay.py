"""Washing-bay ledger models.

One entry records a day of washing-bay trade at a station. Monetary
amounts are derived from vehicle count, unit price, commission rate and
expenses; see :func:`derive_amounts`.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from pyktc.models._base import KtcBaseModel, KtcEnum


class KodsonStatus(KtcEnum):
    COMPLETE = "Complete"
    PENDING = "Pending"
    UNDER_REVIEW = "Under Review"
    UNKNOWN = "Unknown"


def _round2(value: float) -> float:
    return round(value, 2)


def calculate_commission(total_sale: float, rate: float) -> float:
    return _round2(total_sale * rate / 100)


def calculate_bank_deposit(total_sale: float, expenses: float) -> float:
    return _round2(total_sale - expenses)


def calculate_balancing(total_sale: float, commission: float, expenses: float, bank_deposit: float) -> float:
    return _round2(total_sale - commission - expenses - bank_deposit)


class WashingBayEntry(KtcBaseModel):
    id: int
    date: str = ""
    no_of_vehicles: int = 0
    price_per_vehicle: float = 0.0
    total_sale: float = 0.0
    washing_bay_commission: float = 0.0
    washing_bay_commission_rate: float = 0.0
    company_commission: float = 0.0
    expenses: float = 0.0
    bank_deposit: float = 0.0
    balancing: float = 0.0
    kodson_status: KodsonStatus = KodsonStatus.PENDING
    station_id: str = ""
    station_name: str = ""
    created_by: str = ""
    updated_by: str | None = None
    updated_at: datetime | None = None
    notes: str | None = None


class WashingBayEntryForm(KtcBaseModel):
    """Create/update payload. Numeric fields accept form strings."""

    date: str = ""
    no_of_vehicles: int = 0
    price_per_vehicle: float = 0.0
    washing_bay_commission_rate: float = 0.0
    expenses: float = 0.0
    notes: str | None = None


def derive_amounts(form: WashingBayEntryForm) -> dict[str, Any]:
    """Compute the derived ledger amounts for *form* (snake_case keys)."""
    total_sale = _round2(form.no_of_vehicles * form.price_per_vehicle)
    commission = calculate_commission(total_sale, form.washing_bay_commission_rate)
    bank_deposit = calculate_bank_deposit(total_sale, form.expenses)
    return {
        "total_sale": total_sale,
        "washing_bay_commission": commission,
        "washing_bay_commission_rate": form.washing_bay_commission_rate,
        "company_commission": _round2(total_sale - commission),
        "bank_deposit": bank_deposit,
        "balancing": calculate_balancing(total_sale, commission, form.expenses, bank_deposit),
    }


class WashingBayStats(KtcBaseModel):
    total_entries: int = 0
    total_vehicles: int = 0
    total_revenue: float = 0.0
    total_washing_bay_commission: float = 0.0
    total_company_commission: float = 0.0
    total_expenses: float = 0.0
    total_bank_deposits: float = 0.0
    average_vehicles_per_day: float = 0.0
    average_revenue_per_vehicle: float = 0.0
    complete_entries: int = 0
    pending_entries: int = 0
    under_review_entries: int = 0

    @classmethod
    def from_collection(cls, entries: Sequence[WashingBayEntry]) -> WashingBayStats:
        vehicles = sum(e.no_of_vehicles for e in entries)
        revenue = _round2(sum(e.total_sale for e in entries))
        days = len({e.date for e in entries})
        return cls(
            total_entries=len(entries),
            total_vehicles=vehicles,
            total_revenue=revenue,
            total_washing_bay_commission=_round2(sum(e.washing_bay_commission for e in entries)),
            total_company_commission=_round2(sum(e.company_commission for e in entries)),
            total_expenses=_round2(sum(e.expenses for e in entries)),
            total_bank_deposits=_round2(sum(e.bank_deposit for e in entries)),
            average_vehicles_per_day=_round2(vehicles / days) if days else 0.0,
            average_revenue_per_vehicle=_round2(revenue / vehicles) if vehicles else 0.0,
            complete_entries=sum(1 for e in entries if e.kodson_status is KodsonStatus.COMPLETE),
            pending_entries=sum(1 for e in entries if e.kodson_status is KodsonStatus.PENDING),
            under_review_entries=sum(1 for e in entries if e.kodson_status is KodsonStatus.UNDER_REVIEW),
        )
