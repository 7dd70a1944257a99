"""User directory models."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from pydantic import Field

from pyktc.models._base import EntityId, KtcBaseModel, KtcEnum
from pyktc.models.station import AccountStatus


class UserRole(KtcEnum):
    STATION_MANAGER = "station_manager"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"
    UNKNOWN = "unknown"


class User(KtcBaseModel):
    id: EntityId
    username: str = ""
    email: str = ""
    phone: str = ""
    role: UserRole = UserRole.STATION_MANAGER
    status: AccountStatus = AccountStatus.ACTIVE
    first_name: str = ""
    last_name: str = ""
    full_name: str = ""
    last_login: datetime | None = None
    password_changed: bool = False
    must_change_password: bool = False
    account_locked: bool = False
    login_attempts: int = 0
    assigned_stations: list[str] = Field(default_factory=list)
    primary_station: str | None = None
    created_by: str = ""
    created_at: datetime | None = None
    last_modified_by: str | None = None
    last_modified_at: datetime | None = None
    notes: str | None = None

    @property
    def is_assigned(self) -> bool:
        return bool(self.assigned_stations)


class UserStats(KtcBaseModel):
    total_users: int = 0
    active_users: int = 0
    inactive_users: int = 0
    suspended_users: int = 0
    locked_users: int = 0
    station_managers: int = 0
    admins: int = 0
    super_admins: int = 0
    unassigned_users: int = 0
    users_needing_password_reset: int = 0

    @classmethod
    def from_collection(cls, users: Sequence[User]) -> UserStats:
        return cls(
            total_users=len(users),
            active_users=sum(1 for u in users if u.status is AccountStatus.ACTIVE),
            inactive_users=sum(1 for u in users if u.status is AccountStatus.INACTIVE),
            suspended_users=sum(1 for u in users if u.status is AccountStatus.SUSPENDED),
            locked_users=sum(1 for u in users if u.account_locked or u.status is AccountStatus.LOCKED),
            station_managers=sum(1 for u in users if u.role is UserRole.STATION_MANAGER),
            admins=sum(1 for u in users if u.role is UserRole.ADMIN),
            super_admins=sum(1 for u in users if u.role is UserRole.SUPER_ADMIN),
            unassigned_users=sum(1 for u in users if not u.is_assigned),
            users_needing_password_reset=sum(1 for u in users if u.must_change_password),
        )


class UserForm(KtcBaseModel):
    """Create payload, sent to ``/user/adduser`` as-is."""

    username: str = ""
    password: str = ""
    email: str = ""
    role: str = UserRole.STATION_MANAGER.value
    phone: str = ""
    is_active: bool = True
    is_non_locked: bool = True


class UserUpdate(KtcBaseModel):
    """Profile fields editable after creation."""

    email: str | None = None
    phone: str | None = None
    role: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    notes: str | None = None
