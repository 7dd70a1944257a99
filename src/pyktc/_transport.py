"""HTTP transport with per-attempt timeouts, bounded retries and body normalization."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol

import aiohttp

from pyktc._constants import AUTH_STATUS_CODES, SYNTHETIC_SUCCESS_MESSAGE, USER_AGENT
from pyktc._redact import redact_for_log
from pyktc.config import KtcConfig
from pyktc.exceptions import (
    KtcApiError,
    KtcAuthenticationError,
    KtcMalformedResponseError,
    KtcTimeoutError,
    KtcTransportError,
)

_logger = logging.getLogger(__name__)

TokenProvider = Callable[[], str | None]
"""Returns the current bearer token, or ``None`` when signed out."""


class BodyState(StrEnum):
    """How the response body was obtained."""

    JSON = "json"
    """Parsed from a JSON body."""
    EMPTY = "empty"
    """No body (zero length or blank); synthesized success."""
    NOT_JSON = "not_json"
    """Non-JSON content type; synthesized success."""
    MALFORMED = "malformed"
    """JSON content type but undecodable or unparseable; synthesized success (ambiguous)."""


@dataclass(frozen=True, slots=True)
class ApiResponse:
    status: int
    body: dict[str, Any]
    body_state: BodyState
    endpoint: str
    attempts: int = 1
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def message(self) -> str | None:
        value = self.body.get("message")
        return str(value) if value is not None else None

    @property
    def is_ambiguous(self) -> bool:
        """Success was synthesized from a body that could not be parsed."""
        return self.body_state is BodyState.MALFORMED


def _synthetic_success() -> dict[str, Any]:
    return {"success": True, "message": SYNTHETIC_SUCCESS_MESSAGE}


def _decode(raw: bytes, charset: str) -> str | None:
    """Decode a response body, or ``None`` when the bytes do not fit the charset."""
    try:
        return raw.decode(charset)
    except (UnicodeDecodeError, LookupError):
        return None


class Transport(Protocol):
    """Structural transport interface used by stores and coordinators.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def call(
        self,
        endpoint: str,
        method: str = "GET",
        *,
        body: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> ApiResponse: ...


class HttpTransport:
    """Resilient API client.

    Every attempt is bounded by ``config.timeout``. Timeouts, network
    errors and 5xx responses are retried up to ``config.retry_attempts``
    attempts in total, waiting ``config.retry_delay * k`` before attempt
    *k + 1*. Auth failures (401/403) and other 4xx responses are raised
    immediately. When retries are exhausted the last error is raised.
    """

    def __init__(
        self,
        config: KtcConfig,
        http_session: aiohttp.ClientSession,
        token_provider: TokenProvider | None = None,
    ) -> None:
        self._config = config
        self._http = http_session
        self._token_provider: TokenProvider = token_provider or (lambda: config.token)

    def _headers(self) -> dict[str, str]:
        # Rebuilt on every attempt; the provider owns token lifetime.
        headers = {
            "accept": "application/json",
            "content-type": "application/json",
            "user-agent": USER_AGENT,
        }
        token = self._token_provider()
        if token:
            headers["authorization"] = f"Bearer {token}"
        return headers

    async def call(
        self,
        endpoint: str,
        method: str = "GET",
        *,
        body: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> ApiResponse:
        attempts = self._config.retry_attempts
        last_exc: KtcTransportError | None = None

        for attempt in range(1, attempts + 1):
            try:
                response = await self._attempt(endpoint, method, body=body, params=params)
            except KtcTransportError as exc:
                last_exc = exc
                _logger.warning("API call attempt %d/%d failed: %s %s: %s", attempt, attempts, method, endpoint, exc)
                if attempt < attempts:
                    await asyncio.sleep(self._config.retry_delay * attempt)
                continue
            if attempt > 1:
                _logger.info("%s %s succeeded on attempt %d", method, endpoint, attempt)
            return ApiResponse(
                status=response.status,
                body=response.body,
                body_state=response.body_state,
                endpoint=endpoint,
                attempts=attempt,
                headers=response.headers,
            )

        assert last_exc is not None  # noqa: S101
        raise last_exc

    async def _attempt(
        self,
        endpoint: str,
        method: str,
        *,
        body: Mapping[str, Any] | None,
        params: Mapping[str, str] | None,
    ) -> ApiResponse:
        url = f"{self._config.base_url}{endpoint}"
        _logger.debug("%s %s params=%s body=%s", method, url, params or {}, redact_for_log(body))

        json_body = dict(body) if body is not None and method != "GET" else None
        try:
            async with asyncio.timeout(self._config.timeout):
                async with self._http.request(
                    method,
                    url,
                    json=json_body,
                    params=dict(params) if params else None,
                    headers=self._headers(),
                ) as resp:
                    status = resp.status
                    reason = resp.reason or ""
                    headers = {
                        "content-type": resp.headers.get("Content-Type", ""),
                        "content-length": resp.headers.get("Content-Length", ""),
                    }
                    charset = resp.charset or "utf-8"
                    raw = await resp.read()
        except TimeoutError as exc:
            raise KtcTimeoutError(
                f"{method} {endpoint} timed out after {self._config.timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise KtcTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        if status >= 400:
            self._raise_for_status(endpoint, status, reason, _decode(raw, charset) or "")

        return self._normalize(endpoint, status, raw, _decode(raw, charset), headers)

    def _raise_for_status(self, endpoint: str, status: int, reason: str, text: str) -> None:
        detail = reason
        try:
            error_body = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError:
            error_body = {}
        if isinstance(error_body, dict) and error_body.get("message"):
            detail = str(error_body["message"])
        message = f"API Error: {status} - {detail}".rstrip(" -")

        if status in AUTH_STATUS_CODES:
            raise KtcAuthenticationError(message, code=f"HTTP_{status}", endpoint=endpoint, status_code=status)
        if status >= 500:
            raise KtcTransportError(message, status_code=status, endpoint=endpoint)
        raise KtcApiError(message, code=f"HTTP_{status}", endpoint=endpoint, status_code=status)

    def _normalize(
        self,
        endpoint: str,
        status: int,
        raw: bytes,
        text: str | None,
        headers: dict[str, str],
    ) -> ApiResponse:
        content_type = headers.get("content-type", "").lower()

        if headers.get("content-length") == "0" or not raw.strip():
            return ApiResponse(status, _synthetic_success(), BodyState.EMPTY, endpoint, headers=headers)

        if "application/json" not in content_type:
            _logger.debug("Non-JSON response from %s (%s) treated as success", endpoint, content_type or "no type")
            return ApiResponse(status, _synthetic_success(), BodyState.NOT_JSON, endpoint, headers=headers)

        if text is None:
            return self._malformed(endpoint, status, headers, f"undecodable body {raw[:200]!r}")

        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            return self._malformed(endpoint, status, headers, text[:200], exc)

        body: dict[str, Any] = parsed if isinstance(parsed, dict) else {"success": True, "data": parsed}
        if body.get("success") is False:
            raise KtcApiError(
                str(body.get("message") or f"{endpoint} reported failure"),
                code="API_REJECTED",
                endpoint=endpoint,
                status_code=status,
            )
        return ApiResponse(status, body, BodyState.JSON, endpoint, headers=headers)

    def _malformed(
        self,
        endpoint: str,
        status: int,
        headers: dict[str, str],
        detail: str,
        cause: Exception | None = None,
    ) -> ApiResponse:
        if self._config.strict_json:
            raise KtcMalformedResponseError(
                f"Invalid JSON from {endpoint}: {detail}",
                code="MALFORMED_RESPONSE",
                endpoint=endpoint,
                status_code=status,
            ) from cause
        _logger.warning("Unparseable JSON from %s treated as success: %s", endpoint, detail)
        return ApiResponse(status, _synthetic_success(), BodyState.MALFORMED, endpoint, headers=headers)
