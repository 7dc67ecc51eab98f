"""Room store — filtered queries, partial updates, and inserts on ``rooms``."""

from __future__ import annotations

from collections.abc import Sequence
from functools import partial
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from mlm.domain.errors import AmbiguousError, InvalidArgumentError, NotFoundError
from mlm.domain.ids import format_id, parse_id, parse_ids
from mlm.domain.models import Room, RoomFilter, RoomUpdate
from mlm.domain.types import ZERO_TIME
from mlm.infrastructure.database.schema import rooms
from mlm.infrastructure.repositories._statements import (
    bulk_insert_rows,
    collect_assignments,
    fetch_rows,
    insert_one,
    order_and_page,
    update_by_ids,
    upsert_one,
    where_equal,
    where_ids,
)

if TYPE_CHECKING:
    from sqlalchemy import Connection
    from sqlalchemy.engine import RowMapping

_parse_owner = partial(parse_id, kind="created_by")


def room_from_row(row: RowMapping) -> Room:
    """Map a ``rooms`` row to the domain model; NULL ``is_active`` reads as False."""
    return Room(
        id=format_id(row["id"]),
        name=row["name"],
        created_by=format_id(row["created_by"]),
        is_active=bool(row["is_active"]),
        created_at=row["created_at"] or ZERO_TIME,
    )


def room_to_row(room: Room) -> dict[str, Any]:
    """Map a domain room to column values (``id`` omitted when empty)."""
    row: dict[str, Any] = {
        "name": room.name,
        "created_by": _parse_owner(room.created_by),
        "is_active": room.is_active,
        "created_at": None if room.created_at == ZERO_TIME else room.created_at,
    }
    if room.id:
        row["id"] = parse_id(room.id, kind="room")
    return row


class RoomStore:
    """Query and write operations on the ``rooms`` table."""

    def list_rooms(self, conn: Connection, filter: RoomFilter) -> list[Room]:
        """Return zero or more rooms matching every present predicate."""
        stmt = select(rooms)
        stmt = where_ids(stmt, rooms.c.id, filter.ids, kind="room")
        stmt = where_equal(stmt, rooms.c.name, filter.name)
        stmt = where_equal(stmt, rooms.c.created_by, filter.created_by, convert=_parse_owner)
        stmt = where_equal(stmt, rooms.c.is_active, filter.is_active)
        stmt = where_equal(stmt, rooms.c.created_at, filter.created_at)
        stmt = order_and_page(
            stmt,
            rooms,
            order_by=filter.order_by,
            sort=filter.sort,
            limit=filter.limit,
            offset=filter.offset,
        )
        return [room_from_row(row) for row in fetch_rows(conn, stmt, kind="rooms")]

    def get_room(self, conn: Connection, filter: RoomFilter) -> Room:
        """Return exactly one room; raises NotFoundError / AmbiguousError otherwise."""
        results = self.list_rooms(conn, filter)
        if not results:
            raise NotFoundError("no room found")
        if len(results) > 1:
            raise AmbiguousError(f"expected 1 room, got {len(results)}", count=len(results))
        return results[0]

    def update(self, conn: Connection, update: RoomUpdate) -> int:
        """Overwrite the present fields on every room in ``update.ids``."""
        if not update.ids:
            raise InvalidArgumentError("no room IDs provided")
        ids = parse_ids(update.ids, kind="room")

        values = collect_assignments(
            {
                "name": update.name,
                "is_active": update.is_active,
                "created_at": update.created_at,
                "created_by": update.created_by,
            },
            converters={"created_by": _parse_owner},
        )
        if not values:
            return 0
        return update_by_ids(conn, rooms, ids, values, kind="rooms")

    def bulk_insert(self, conn: Connection, new_rooms: Sequence[Room]) -> int:
        return bulk_insert_rows(conn, rooms, [room_to_row(r) for r in new_rooms])

    def insert(self, conn: Connection, room: Room) -> Room:
        new_id = insert_one(conn, rooms, room_to_row(room), kind="room")
        return room.model_copy(update={"id": format_id(new_id)})

    def upsert(self, conn: Connection, room: Room) -> Room:
        if not room.id:
            raise InvalidArgumentError("upsert room: an ID is required")
        upsert_one(conn, rooms, room_to_row(room), kind="room")
        return room
