"""Enums and zero values shared by the entity models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum


class Gender(StrEnum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class SortDirection(StrEnum):
    """Accepted ``sort`` values; parsing is case-insensitive."""

    ASC = "asc"
    DESC = "desc"


# Domain value for an unset timestamp column.  Stored back as NULL.
ZERO_TIME = datetime.min


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the storage convention)."""
    return datetime.now(UTC).replace(tzinfo=None)
