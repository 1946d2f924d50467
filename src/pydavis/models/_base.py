"""Base model and enum for WeatherLink Live payloads.

Every wire model inherits from :class:`DavisBaseModel`, which is frozen,
ignores unknown keys and accepts both the wire alias and the Python field
name. State enums inherit from :class:`DavisEnum`, which resolves unmapped
values to ``UNKNOWN`` instead of raising ``ValueError``.
"""

from __future__ import annotations

import enum
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict


def parse_epoch(value: Any) -> datetime | None:
    """Convert an epoch-seconds timestamp to a UTC datetime.

    ``None`` and existing datetimes pass through unchanged. Values that
    cannot be converted raise ``ValueError`` so pydantic reports them as a
    validation error.
    """
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str) and not value.isdigit():
        # ISO strings (canonical report JSON) are left to pydantic.
        return value  # type: ignore[return-value]
    try:
        return datetime.fromtimestamp(int(value), tz=UTC)
    except (OverflowError, OSError, TypeError, ValueError) as exc:
        raise ValueError(f"invalid epoch timestamp {value!r}: {exc}") from exc


DavisTimestamp = Annotated[datetime | None, BeforeValidator(parse_epoch)]
"""Annotated type that coerces epoch-seconds ints to UTC datetimes."""


class DavisEnum(enum.IntEnum):
    """Base for unit state enums.

    Every subclass **must** define ``UNKNOWN = -1``.
    """

    @classmethod
    def _missing_(cls, value: object) -> DavisEnum:
        unknown: DavisEnum = cls.UNKNOWN  # type: ignore[attr-defined]
        return unknown


class DavisBaseModel(BaseModel):
    """Base for unit payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )


class DeviceError(DavisBaseModel):
    """Generic error object returned by the unit."""

    code: int | None = None
    message: str = ""
