"""Base model for KTC API payloads.

Every wire model inherits from :class:`KtcBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that drops explicit ``null``
  values so the field default is used.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def _coerce_id(value: Any) -> Any:
    # The backend mixes numeric and string identifiers for the same resource.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(int(value))
    return value


EntityId = Annotated[str, BeforeValidator(_coerce_id)]
"""String identifier that also accepts numeric ids from the backend."""


class KtcBaseModel(BaseModel):
    """Base for KTC API models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Original API payload."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, values: Any) -> Any:
        """Drop ``None`` values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned = {key: value for key, value in values.items() if value is not None}
        # Keep the caller's raw= when constructing with kwargs.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape the backend expects."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class KtcEnum(StrEnum):
    """Base for KTC status/role enums.

    Every subclass **must** define ``UNKNOWN``. Matching is
    case-insensitive, and values without a mapped member resolve to
    ``UNKNOWN`` instead of raising ``ValueError``.
    """

    @classmethod
    def _missing_(cls, value: object) -> KtcEnum:
        if isinstance(value, str):
            folded = value.strip().casefold()
            for member in cls:
                if member.value.casefold() == folded:
                    return member
        unknown: KtcEnum = cls["UNKNOWN"]
        return unknown
