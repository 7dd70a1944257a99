"""Data models for KTC API payloads."""

from pyktc.models._base import EntityId, KtcBaseModel, KtcEnum
from pyktc.models.common import (
    ApiError,
    ConnectionStatus,
    DataSource,
    FetchResult,
    MutationIntent,
    MutationKind,
    MutationState,
    StatusChange,
)
from pyktc.models.station import (
    AccountStatus,
    ManagerAssignment,
    OperatingHours,
    PasswordReset,
    Station,
    StationAccount,
    StationContact,
    StationFinancial,
    StationForm,
    StationLocation,
    StationManagerContact,
    StationOperational,
    StationStats,
    StationStatus,
)
from pyktc.models.user import User, UserForm, UserRole, UserStats, UserUpdate
from pyktc.models.washing_bay import (
    KodsonStatus,
    WashingBayEntry,
    WashingBayEntryForm,
    WashingBayStats,
    calculate_balancing,
    calculate_bank_deposit,
    calculate_commission,
    derive_amounts,
)

__all__ = [
    "AccountStatus",
    "ApiError",
    "ConnectionStatus",
    "DataSource",
    "EntityId",
    "FetchResult",
    "KodsonStatus",
    "KtcBaseModel",
    "KtcEnum",
    "ManagerAssignment",
    "MutationIntent",
    "MutationKind",
    "MutationState",
    "OperatingHours",
    "PasswordReset",
    "Station",
    "StationAccount",
    "StationContact",
    "StationFinancial",
    "StationForm",
    "StationLocation",
    "StationManagerContact",
    "StationOperational",
    "StationStats",
    "StationStatus",
    "StatusChange",
    "User",
    "UserForm",
    "UserRole",
    "UserStats",
    "UserUpdate",
    "WashingBayEntry",
    "WashingBayEntryForm",
    "WashingBayStats",
    "calculate_balancing",
    "calculate_bank_deposit",
    "calculate_commission",
    "derive_amounts",
]
