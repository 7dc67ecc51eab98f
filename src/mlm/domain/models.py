"""Domain entities and the per-entity filter/update value objects.

Entities are clean records: string identifiers, no nullable columns
(unset storage values arrive as zero values).  Filters and updates are
built per call and carry :data:`~mlm.domain.nullable.UNSET` for every
field the caller does not want applied.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel

from mlm.domain.nullable import UNSET, Nullable
from mlm.domain.types import ZERO_TIME

# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


class User(BaseModel):
    model_config = {"frozen": True}

    id: str = ""
    username: str
    email: str = ""
    display_name: str = ""
    gender: str = ""
    created_at: datetime = ZERO_TIME


class Room(BaseModel):
    model_config = {"frozen": True}

    id: str = ""
    name: str
    created_by: str
    is_active: bool = False
    created_at: datetime = ZERO_TIME


class RoomMember(BaseModel):
    """Membership of a user in a room; ``left_at`` marks departure."""

    model_config = {"frozen": True}

    id: str = ""
    room_id: str
    user_id: str
    joined_at: datetime = ZERO_TIME
    left_at: datetime = ZERO_TIME


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UserFilter:
    """Predicates for :meth:`UserStore.list`.

    ``order_by`` takes a ``users`` column name (``"created_at"``,
    ``"username"``, ``"id"``); ``sort`` is ``"asc"`` or ``"desc"``.
    """

    ids: list[str] = field(default_factory=list)
    username: Nullable[str] = UNSET
    email: Nullable[str] = UNSET
    gender: Nullable[str] = UNSET

    order_by: Nullable[str] = UNSET
    sort: Nullable[str] = UNSET
    limit: Nullable[int] = UNSET
    offset: Nullable[int] = UNSET


@dataclass(frozen=True)
class RoomFilter:
    ids: list[str] = field(default_factory=list)
    name: Nullable[str] = UNSET
    created_by: Nullable[str] = UNSET
    is_active: Nullable[bool] = UNSET
    created_at: Nullable[datetime] = UNSET

    order_by: Nullable[str] = UNSET
    sort: Nullable[str] = UNSET
    limit: Nullable[int] = UNSET
    offset: Nullable[int] = UNSET


@dataclass(frozen=True)
class RoomMemberFilter:
    ids: list[str] = field(default_factory=list)
    room_id: Nullable[str] = UNSET
    user_id: Nullable[str] = UNSET
    joined_at: Nullable[datetime | None] = UNSET
    left_at: Nullable[datetime | None] = UNSET


# ---------------------------------------------------------------------------
# Partial updates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UserUpdate:
    """Sparse overwrite applied to every user in ``ids``."""

    ids: list[str] = field(default_factory=list)
    username: Nullable[str] = UNSET
    email: Nullable[str | None] = UNSET
    display_name: Nullable[str | None] = UNSET
    gender: Nullable[str | None] = UNSET


@dataclass(frozen=True)
class RoomUpdate:
    ids: list[str] = field(default_factory=list)
    name: Nullable[str] = UNSET
    is_active: Nullable[bool] = UNSET
    created_at: Nullable[datetime | None] = UNSET
    created_by: Nullable[str] = UNSET


@dataclass(frozen=True)
class RoomMemberUpdate:
    ids: list[str] = field(default_factory=list)
    room_id: Nullable[str] = UNSET
    user_id: Nullable[str] = UNSET
    joined_at: Nullable[datetime | None] = UNSET
    left_at: Nullable[datetime | None] = UNSET
