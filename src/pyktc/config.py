"""Client configuration for pyktc."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyktc._constants import (
    BASE_URL,
    DEFAULT_ACTOR_NAME,
    DEFAULT_DEBOUNCE_WINDOW,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TIMEOUT,
    HEALTH_ENDPOINT,
)
from pyktc.exceptions import KtcConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class KtcConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        API base URL, without a trailing slash.
    health_endpoint : str
        Path probed to classify backend reachability.
    timeout : float
        Per-attempt timeout in seconds. Applies to API calls and probes.
    retry_attempts : int
        Maximum number of attempts per API call (not retries *after* the
        first attempt).
    retry_delay : float
        Linear backoff base in seconds. The wait before attempt *k + 1* is
        ``retry_delay * k``.
    debounce_window : float
        Quiet window in seconds used by the filter debouncer.
    strict_json : bool
        When ``True`` an unparseable JSON body raises
        :class:`~pyktc.exceptions.KtcMalformedResponseError` instead of
        being normalized to ``{"success": True}``.
    token : str or None
        Static bearer token, used when no token provider is injected.
    actor_name : str
        Name recorded as ``createdBy``/``lastModifiedBy`` on mutations.
    """

    base_url: str = BASE_URL
    health_endpoint: str = HEALTH_ENDPOINT
    timeout: float = DEFAULT_TIMEOUT
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    retry_delay: float = DEFAULT_RETRY_DELAY
    debounce_window: float = DEFAULT_DEBOUNCE_WINDOW
    strict_json: bool = False
    token: str | None = None
    actor_name: str = DEFAULT_ACTOR_NAME

    def __post_init__(self) -> None:
        if self.retry_attempts < 1:
            raise KtcConfigError(f"retry_attempts must be >= 1, got {self.retry_attempts}")
        if self.timeout <= 0:
            raise KtcConfigError(f"timeout must be positive, got {self.timeout}")
        if self.retry_delay < 0:
            raise KtcConfigError(f"retry_delay must be >= 0, got {self.retry_delay}")
        if self.debounce_window < 0:
            raise KtcConfigError(f"debounce_window must be >= 0, got {self.debounce_window}")
        # Endpoints are joined by plain concatenation.
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def max_elapsed(self) -> float:
        """Worst-case wall time of one API call including backoff."""
        backoff = sum(self.retry_delay * k for k in range(1, self.retry_attempts))
        return self.retry_attempts * self.timeout + backoff

    @classmethod
    def from_env(cls, **overrides: Any) -> KtcConfig:
        """Create configuration from ``KTC_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "KTC_BASE_URL": "base_url",
            "KTC_HEALTH_ENDPOINT": "health_endpoint",
            "KTC_TOKEN": "token",
            "KTC_ACTOR_NAME": "actor_name",
        }
        _ENV_FLOAT_MAP = {
            "KTC_TIMEOUT": "timeout",
            "KTC_RETRY_DELAY": "retry_delay",
            "KTC_DEBOUNCE_WINDOW": "debounce_window",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        try:
            for env_key, field_name in _ENV_FLOAT_MAP.items():
                val = env.get(env_key)
                if val is not None:
                    config_kwargs[field_name] = float(val)

            attempts_env = env.get("KTC_RETRY_ATTEMPTS")
            if attempts_env is not None:
                config_kwargs["retry_attempts"] = int(attempts_env)
        except ValueError as exc:
            raise KtcConfigError(f"Invalid numeric KTC_* environment value: {exc}") from exc

        config_kwargs["strict_json"] = _env_bool(env.get("KTC_STRICT_JSON"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
