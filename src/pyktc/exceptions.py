"""Custom exception hierarchy for pyktc."""

from __future__ import annotations

from collections.abc import Mapping


class KtcError(Exception):
    """Base exception for all pyktc errors."""


class KtcConfigError(KtcError):
    """Invalid configuration, or an operation a resource does not route."""


class KtcConnectivityError(KtcError):
    """The health probe could not reach the backend."""


class KtcTransportError(KtcError):
    """Retryable HTTP-level failure (network error, timeout, 5xx)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class KtcTimeoutError(KtcTransportError):
    """A single attempt exceeded the configured timeout."""


class KtcApiError(KtcError):
    """Non-retryable failure reported by the backend.

    Covers 4xx responses and bodies that carry ``success: false``.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
        status_code: int | None = None,
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(message)


class KtcAuthenticationError(KtcApiError):
    """Bearer token rejected (HTTP 401/403).

    Never retried: repeating the request with the same token cannot succeed.
    Token refresh is the session collaborator's job.
    """


class KtcMalformedResponseError(KtcApiError):
    """Response body claimed to be JSON but could not be parsed.

    Only raised when ``KtcConfig.strict_json`` is enabled; otherwise the
    transport logs the ambiguity and synthesizes a success body.
    """


class KtcValidationError(KtcError):
    """Client-side validation failed before any network call was made."""

    def __init__(self, message: str, *, errors: Mapping[str, str] | None = None) -> None:
        self.errors: dict[str, str] = dict(errors or {})
        super().__init__(message)
