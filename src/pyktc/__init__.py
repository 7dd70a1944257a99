"""pyktc - resilient data-sync client for the KTC Energy management backend."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyktc")
except PackageNotFoundError:
    __version__ = "0+local"

from pyktc._transport import ApiResponse, BodyState, HttpTransport, Transport
from pyktc.client import CollectionManager, KtcClient
from pyktc.config import KtcConfig
from pyktc.connection import ConnectionMonitor, ConnectionStatusProvider, FixedConnectionProvider
from pyktc.debounce import FilterDebouncer
from pyktc.exceptions import (
    KtcApiError,
    KtcAuthenticationError,
    KtcConfigError,
    KtcConnectivityError,
    KtcError,
    KtcMalformedResponseError,
    KtcTimeoutError,
    KtcTransportError,
    KtcValidationError,
)
from pyktc.fallback import FallbackRepository
from pyktc.filters import StationFilters, UserFilters, WashingBayFilters
from pyktc.mutations import MutationCoordinator
from pyktc.notify import LoggingNotificationSink, NotificationSink, RecordingNotificationSink
from pyktc.resources import StationsResource, UsersResource, WashingBayResource
from pyktc.store import SyncedCollectionStore

__all__ = [
    "ApiResponse",
    "BodyState",
    "CollectionManager",
    "ConnectionMonitor",
    "ConnectionStatusProvider",
    "FallbackRepository",
    "FilterDebouncer",
    "FixedConnectionProvider",
    "HttpTransport",
    "KtcApiError",
    "KtcAuthenticationError",
    "KtcClient",
    "KtcConfig",
    "KtcConfigError",
    "KtcConnectivityError",
    "KtcError",
    "KtcMalformedResponseError",
    "KtcTimeoutError",
    "KtcTransportError",
    "KtcValidationError",
    "LoggingNotificationSink",
    "MutationCoordinator",
    "NotificationSink",
    "RecordingNotificationSink",
    "StationFilters",
    "StationsResource",
    "SyncedCollectionStore",
    "Transport",
    "UserFilters",
    "UsersResource",
    "WashingBayFilters",
    "WashingBayResource",
    "__version__",
]
