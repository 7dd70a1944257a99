"""Internal constants shared across the library."""

BASE_URL = "http://localhost:8081/api"
HEALTH_ENDPOINT = "/health"
USER_AGENT = "pyktc/1 (+aiohttp)"

#: Per-attempt timeout in seconds for API calls and health probes.
DEFAULT_TIMEOUT: float = 15.0
DEFAULT_RETRY_ATTEMPTS: int = 3
#: Base delay in seconds; attempt *k* waits ``RETRY_DELAY * k`` before retrying.
DEFAULT_RETRY_DELAY: float = 1.0
#: Quiet window in seconds before a burst of filter changes triggers a fetch.
DEFAULT_DEBOUNCE_WINDOW: float = 0.3

DEFAULT_ACTOR_NAME = "Current User"

#: Filter sentinel meaning "no constraint".
ALL = "ALL"

#: Body synthesized for empty or unparseable responses.
SYNTHETIC_SUCCESS_MESSAGE = "Operation completed successfully"

AUTH_STATUS_CODES: frozenset[int] = frozenset({401, 403})
