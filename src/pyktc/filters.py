"""Filter sets for synchronized collections.

A filter set always carries every key it knows about. Enumerated keys
default to :data:`~pyktc._constants.ALL`; free-text keys default to the
empty string, which is read the same way. Missing or ``None`` keys fall
back to those defaults, so a filter set is never partially defined.
"""

from __future__ import annotations

import json
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from pyktc._constants import ALL


def is_constrained(value: Any, *, free_text: bool = False) -> bool:
    """Whether a filter value actually narrows the result set.

    Free-text values are constrained whenever they are non-blank; the
    ``ALL`` sentinel only applies to enumerated keys.
    """
    if value is None:
        return False
    text = str(value).strip()
    if free_text:
        return bool(text)
    return bool(text) and text.upper() != ALL


class FilterSet(BaseModel):
    """Base for per-resource filter sets."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    FREE_TEXT_FIELDS: ClassVar[frozenset[str]] = frozenset({"search"})

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str):
                if key in cls.FREE_TEXT_FIELDS:
                    value = value.strip()
                elif value.strip().upper() == ALL:
                    value = ALL
            cleaned[key] = value
        return cleaned

    def _constrained(self) -> list[tuple[str, str, str]]:
        # (field name, wire name, value) for every key that narrows the result set.
        return [
            (name, field.alias or name, str(getattr(self, name)))
            for name, field in type(self).model_fields.items()
            if is_constrained(getattr(self, name), free_text=name in self.FREE_TEXT_FIELDS)
        ]

    def active(self) -> dict[str, str]:
        """Constrained keys only, by field name."""
        return {name: value for name, _, value in self._constrained()}

    def to_query_params(self) -> dict[str, str]:
        """Constrained keys only, by their camelCase wire name."""
        return {alias: value for _, alias, value in self._constrained()}

    def signature(self) -> str:
        """Stable string identifying this filter set, used for duplicate suppression."""
        return json.dumps(
            {"type": type(self).__name__, **self.model_dump(by_alias=True)},
            sort_keys=True,
            separators=(",", ":"),
        )

    def replace(self, **changes: Any) -> Self:
        """Return a new filter set with *changes* applied over this one."""
        return type(self).model_validate({**self.model_dump(), **changes})


class StationFilters(FilterSet):
    status: str = ALL
    user_status: str = ALL
    region: str = ALL
    has_manager: str = ALL
    """``YES`` / ``NO``."""
    needs_password_reset: str = ALL
    """``YES`` / ``NO``."""
    search: str = ""


class UserFilters(FilterSet):
    status: str = ALL
    role: str = ALL
    assignment_status: str = ALL
    """``ASSIGNED`` / ``UNASSIGNED``."""
    needs_password_reset: str = ALL
    search: str = ""


class WashingBayFilters(FilterSet):
    status: str = ALL
    """Kodson status, matched case-insensitively."""
    search: str = ""


def contains_text(needle: str, *haystacks: str | None) -> bool:
    """Case-insensitive substring match across *haystacks*."""
    folded = needle.casefold()
    return any(folded in h.casefold() for h in haystacks if h)


def yes_no_matches(flag: str, value: bool) -> bool:
    """Match a ``YES``/``NO`` filter value against a boolean."""
    return value if flag.upper() == "YES" else not value
