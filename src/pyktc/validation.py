"""Client-side checks run before a mutation touches the network."""

from __future__ import annotations

import re

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIALS = "@$!%*?&"

_PASSWORD_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"[a-z]"), "Password must contain lowercase letters"),
    (re.compile(r"[A-Z]"), "Password must contain uppercase letters"),
    (re.compile(r"\d"), "Password must contain numbers"),
    (re.compile(f"[{re.escape(PASSWORD_SPECIALS)}]"), f"Password must contain special characters ({PASSWORD_SPECIALS})"),
)


def password_feedback(password: str) -> list[str]:
    """Unmet strength rules for *password*; empty when it is acceptable."""
    feedback: list[str] = []
    if len(password) < PASSWORD_MIN_LENGTH:
        feedback.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    feedback.extend(message for pattern, message in _PASSWORD_RULES if not pattern.search(password))
    return feedback


def missing_fields(form: BaseModel, *fields: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    for name in fields:
        value = getattr(form, name, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors[name] = f"{name.replace('_', ' ').capitalize()} is required"
    return errors


def errors_from_pydantic(exc: PydanticValidationError) -> dict[str, str]:
    """Flatten a pydantic error into ``{field: message}``."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        key = ".".join(str(part) for part in error.get("loc", ())) or "payload"
        errors.setdefault(key, error.get("msg", "Invalid value"))
    return errors
