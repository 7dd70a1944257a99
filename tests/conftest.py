from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from typing import Any

import pytest

from pyktc._transport import ApiResponse, BodyState
from pyktc.connection import FixedConnectionProvider
from pyktc.notify import RecordingNotificationSink


class FakeResponse:
    def __init__(
        self,
        status: int = 200,
        text: str | bytes = "",
        *,
        content_type: str = "application/json",
        content_length: str | None = None,
        reason: str = "OK",
        delay: float = 0.0,
        charset: str | None = None,
    ) -> None:
        self.status = status
        self.reason = reason
        self.headers = {"Content-Type": content_type}
        if content_length is not None:
            self.headers["Content-Length"] = content_length
        self.charset = charset
        self._body = text.encode(charset or "utf-8") if isinstance(text, str) else text
        self.delay = delay

    async def read(self) -> bytes:
        return self._body


class _RequestContext:
    def __init__(self, outcome: FakeResponse | BaseException) -> None:
        self._outcome = outcome

    async def __aenter__(self) -> FakeResponse:
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        if self._outcome.delay:
            await asyncio.sleep(self._outcome.delay)
        return self._outcome

    async def __aexit__(self, *exc: Any) -> None:
        return None


class FakeHttpSession:
    """Stand-in for ``aiohttp.ClientSession.request``.

    Outcomes are consumed in order; the last one repeats.
    """

    def __init__(self, *outcomes: FakeResponse | BaseException) -> None:
        self._outcomes = list(outcomes) or [FakeResponse(200, '{"success": true}')]
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs: Any) -> _RequestContext:
        self.requests.append({"method": method, "url": url, **kwargs})
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        return _RequestContext(outcome)

    async def close(self) -> None:
        self.closed = True


Handler = Callable[[str, str, Mapping[str, Any] | None, Mapping[str, str] | None], Any]


class FakeTransport:
    """Records calls and answers from *handler* (a body dict or an exception)."""

    def __init__(self, handler: Handler | None = None, *, delay: float = 0.0) -> None:
        self._handler = handler or (lambda *_: {"success": True, "data": []})
        self._delay = delay
        self.calls: list[tuple[str, str, Mapping[str, Any] | None, Mapping[str, str] | None]] = []

    def calls_to(self, method: str) -> list[str]:
        return [endpoint for m, endpoint, _, _ in self.calls if m == method]

    async def call(
        self,
        endpoint: str,
        method: str = "GET",
        *,
        body: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> ApiResponse:
        self.calls.append((method, endpoint, body, params))
        if self._delay:
            await asyncio.sleep(self._delay)
        outcome = self._handler(method, endpoint, body, params)
        if isinstance(outcome, BaseException):
            raise outcome
        return ApiResponse(200, outcome, BodyState.JSON, endpoint)


@pytest.fixture
def notifier() -> RecordingNotificationSink:
    return RecordingNotificationSink()


@pytest.fixture
def online() -> FixedConnectionProvider:
    return FixedConnectionProvider(connected=True)


@pytest.fixture
def offline() -> FixedConnectionProvider:
    return FixedConnectionProvider(connected=False)
