"""Room membership store on ``room_members``.

No ordering or pagination here: membership lists are small and callers
filter by room or user.  ``left_at=Value(None)`` selects current members.
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import partial
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from mlm.domain.errors import AmbiguousError, InvalidArgumentError, NotFoundError
from mlm.domain.ids import format_id, parse_id, parse_ids
from mlm.domain.models import RoomMember, RoomMemberFilter, RoomMemberUpdate
from mlm.domain.types import ZERO_TIME
from mlm.infrastructure.database.schema import room_members
from mlm.infrastructure.repositories._statements import (
    bulk_insert_rows,
    collect_assignments,
    fetch_rows,
    insert_one,
    update_by_ids,
    upsert_one,
    where_equal,
    where_ids,
)

if TYPE_CHECKING:
    from sqlalchemy import Connection
    from sqlalchemy.engine import RowMapping

_parse_room = partial(parse_id, kind="room")
_parse_user = partial(parse_id, kind="user")


def member_from_row(row: RowMapping) -> RoomMember:
    return RoomMember(
        id=format_id(row["id"]),
        room_id=format_id(row["room_id"]),
        user_id=format_id(row["user_id"]),
        joined_at=row["joined_at"] or ZERO_TIME,
        left_at=row["left_at"] or ZERO_TIME,
    )


def member_to_row(member: RoomMember) -> dict[str, Any]:
    row: dict[str, Any] = {
        "room_id": _parse_room(member.room_id),
        "user_id": _parse_user(member.user_id),
        "joined_at": None if member.joined_at == ZERO_TIME else member.joined_at,
        "left_at": None if member.left_at == ZERO_TIME else member.left_at,
    }
    if member.id:
        row["id"] = parse_id(member.id, kind="room member")
    return row


class RoomMemberStore:
    """Query and write operations on the ``room_members`` table."""

    def list_members(self, conn: Connection, filter: RoomMemberFilter) -> list[RoomMember]:
        stmt = select(room_members)
        stmt = where_ids(stmt, room_members.c.id, filter.ids, kind="room member")
        stmt = where_equal(stmt, room_members.c.room_id, filter.room_id, convert=_parse_room)
        stmt = where_equal(stmt, room_members.c.user_id, filter.user_id, convert=_parse_user)
        stmt = where_equal(stmt, room_members.c.joined_at, filter.joined_at)
        stmt = where_equal(stmt, room_members.c.left_at, filter.left_at)
        return [member_from_row(row) for row in fetch_rows(conn, stmt, kind="room members")]

    def get_member(self, conn: Connection, filter: RoomMemberFilter) -> RoomMember:
        results = self.list_members(conn, filter)
        if not results:
            raise NotFoundError("no room member found")
        if len(results) > 1:
            raise AmbiguousError(
                f"expected 1 room member, got {len(results)}", count=len(results)
            )
        return results[0]

    def update(self, conn: Connection, update: RoomMemberUpdate) -> int:
        if not update.ids:
            raise InvalidArgumentError("no room member IDs provided")
        ids = parse_ids(update.ids, kind="room member")

        values = collect_assignments(
            {
                "room_id": update.room_id,
                "user_id": update.user_id,
                "joined_at": update.joined_at,
                "left_at": update.left_at,
            },
            converters={"room_id": _parse_room, "user_id": _parse_user},
        )
        if not values:
            return 0
        return update_by_ids(conn, room_members, ids, values, kind="room members")

    def bulk_insert(self, conn: Connection, new_members: Sequence[RoomMember]) -> int:
        return bulk_insert_rows(conn, room_members, [member_to_row(m) for m in new_members])

    def insert(self, conn: Connection, member: RoomMember) -> RoomMember:
        new_id = insert_one(conn, room_members, member_to_row(member), kind="room member")
        return member.model_copy(update={"id": format_id(new_id)})

    def upsert(self, conn: Connection, member: RoomMember) -> RoomMember:
        if not member.id:
            raise InvalidArgumentError("upsert room member: an ID is required")
        upsert_one(conn, room_members, member_to_row(member), kind="room member")
        return member
