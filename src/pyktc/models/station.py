"""Station models.

Fields are mapped from the ``/stations`` list response. A station owns
at most one station-manager login (``user``) and optionally a manager
contact assigned from the user directory.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from pydantic import AliasChoices, Field

from pyktc.models._base import EntityId, KtcBaseModel, KtcEnum


class StationStatus(KtcEnum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    MAINTENANCE = "MAINTENANCE"
    SUSPENDED = "SUSPENDED"
    UNKNOWN = "UNKNOWN"


class AccountStatus(KtcEnum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    LOCKED = "LOCKED"
    UNKNOWN = "UNKNOWN"


class OperatingHours(KtcBaseModel):
    open: str = "06:00"
    close: str = "22:00"
    is_24_hours: bool = Field(default=False, alias="is24Hours")


class StationLocation(KtcBaseModel):
    address: str = ""
    city: str = ""
    region: str = ""


class StationManagerContact(KtcBaseModel):
    """Manager assigned to a station from the user directory."""

    name: str = ""
    phone: str = ""
    email: str = ""
    user_id: str | None = None
    assigned_at: datetime | None = None
    assigned_by: str | None = None


class StationContact(KtcBaseModel):
    phone: str = ""
    email: str = ""
    manager: StationManagerContact | None = None


class StationOperational(KtcBaseModel):
    status: StationStatus = StationStatus.ACTIVE
    operating_hours: OperatingHours = Field(default_factory=OperatingHours)
    fuel_types: list[str] = Field(default_factory=list)
    tank_capacity: dict[str, float] = Field(default_factory=dict)
    pump_count: int = 0


class StationFinancial(KtcBaseModel):
    monthly_target: float = 0.0
    """Monthly sales target in Ghana Cedis."""
    commission_rate: float = 0.0
    """Commission percentage."""
    security_deposit: float = 0.0
    last_audit_date: str | None = None


class StationAccount(KtcBaseModel):
    """Login account bound to a station (username is the station code)."""

    id: EntityId
    username: str = ""
    email: str = ""
    role: str = "station_manager"
    status: AccountStatus = Field(
        default=AccountStatus.ACTIVE,
        validation_alias=AliasChoices("status", "managerStatus"),
    )
    last_login: datetime | None = None
    password_changed: bool = False
    must_change_password: bool = False
    account_locked: bool = False
    login_attempts: int = 0
    created_at: datetime | None = None
    last_modified_at: datetime | None = None


class Station(KtcBaseModel):
    id: EntityId
    name: str = ""
    code: str = ""
    location: StationLocation = Field(default_factory=StationLocation)
    contact: StationContact = Field(default_factory=StationContact)
    operational: StationOperational = Field(default_factory=StationOperational)
    financial: StationFinancial = Field(default_factory=StationFinancial)
    user: StationAccount | None = None
    created_by: str = ""
    created_at: datetime | None = None
    last_modified_by: str | None = None
    last_modified_at: datetime | None = None
    notes: str | None = None

    @property
    def has_manager(self) -> bool:
        return self.contact.manager is not None

    @property
    def needs_password_reset(self) -> bool:
        return self.user is not None and self.user.must_change_password


class StationStats(KtcBaseModel):
    total_stations: int = 0
    active_stations: int = 0
    inactive_stations: int = 0
    maintenance_stations: int = 0
    total_users: int = 0
    active_users: int = 0
    locked_users: int = 0
    total_monthly_target: float = 0.0
    average_commission_rate: float = 0.0
    stations_with_managers: int = 0
    stations_needing_attention: int = 0
    users_needing_password_reset: int = 0

    @classmethod
    def from_collection(cls, stations: Sequence[Station]) -> StationStats:
        """Aggregate statistics for *stations*."""
        accounts = [s.user for s in stations if s.user is not None]
        rates = [s.financial.commission_rate for s in stations]
        return cls(
            total_stations=len(stations),
            active_stations=sum(1 for s in stations if s.operational.status is StationStatus.ACTIVE),
            inactive_stations=sum(1 for s in stations if s.operational.status is StationStatus.INACTIVE),
            maintenance_stations=sum(1 for s in stations if s.operational.status is StationStatus.MAINTENANCE),
            total_users=len(accounts),
            active_users=sum(1 for a in accounts if a.status is AccountStatus.ACTIVE),
            locked_users=sum(1 for a in accounts if a.account_locked or a.status is AccountStatus.LOCKED),
            total_monthly_target=sum(s.financial.monthly_target for s in stations),
            average_commission_rate=round(sum(rates) / len(rates), 2) if rates else 0.0,
            stations_with_managers=sum(1 for s in stations if s.has_manager),
            # No manager, or a login that is locked or must change its password.
            stations_needing_attention=sum(
                1
                for s in stations
                if not s.has_manager or (s.user is not None and (s.user.account_locked or s.user.must_change_password))
            ),
            users_needing_password_reset=sum(1 for s in stations if s.needs_password_reset),
        )


class StationForm(KtcBaseModel):
    """Create/update payload for a station."""

    name: str = ""
    code: str = ""
    address: str = ""
    city: str = ""
    region: str = ""
    phone: str = ""
    email: str = ""
    operating_hours: OperatingHours = Field(default_factory=OperatingHours)
    fuel_types: list[str] = Field(default_factory=list)
    tank_capacity: dict[str, float] = Field(default_factory=dict)
    pump_count: int = 0
    monthly_target: float = 0.0
    notes: str | None = None


class ManagerAssignment(KtcBaseModel):
    """Details of a directory user being assigned as station manager."""

    manager: str
    manager_email: str = ""
    manager_phone: str = ""
    manager_user_id: str


class PasswordReset(KtcBaseModel):
    new_password: str
    confirm_password: str
    must_change_password: bool = True
