"""Masking of secrets in debug logs and recorded mutation intents.

User creation and password resets carry plaintext passwords, and every
request carries a bearer token. :func:`redact_for_log` returns a copy of
a request body, form or header map with those values masked and long
strings cut short.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence, Set
from typing import Any

from pydantic import BaseModel

REDACTED = "<redacted>"

_MAX_DEPTH = 20

#: Normalized key names whose values are masked.
_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "authorization",
        "cookie",
        "setcookie",
        "secret",
        "apikey",
    }
)

#: Any key ending in one of these is masked (``password``, ``newPassword``,
#: ``confirm_password``, ``accessToken``, ...).
_SENSITIVE_SUFFIXES: tuple[str, ...] = ("password", "token")

_BEARER = re.compile(r"^(bearer)\s+\S+", re.IGNORECASE)


def _normalize_key(key: str) -> str:
    return key.lower().replace("_", "").replace("-", "")


def is_sensitive_key(key: str) -> bool:
    """Whether values stored under *key* must never be logged."""
    normalized = _normalize_key(key)
    return normalized in _SENSITIVE_KEYS or normalized.endswith(_SENSITIVE_SUFFIXES)


def _redact_text(value: str, max_string: int) -> str:
    # Header values copied into a body still carry the scheme.
    if _BEARER.match(value):
        return _BEARER.sub(rf"\1 {REDACTED}", value, count=1)
    if len(value) > max_string:
        return f"{value[:max_string]}…<truncated>"
    return value


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for logs and diagnostics.

    Pydantic models are dumped by field name first, so a form never
    reaches a log through its ``repr``.
    """
    if _depth > _MAX_DEPTH:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        return _redact_text(value, max_string)

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            # Flags such as ``mustChangePassword`` are not secrets.
            if is_sensitive_key(key) and not isinstance(v, bool):
                redacted[key] = REDACTED
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, (Sequence, Set)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return f"<{type(value).__name__}>"
