"""User store — filtered queries, partial updates, and inserts on ``users``.

The store holds no state: every method takes the execution handle
(a SQLAlchemy ``Connection``) from the caller, who owns the transaction.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from mlm.domain.errors import AmbiguousError, InvalidArgumentError, NotFoundError
from mlm.domain.ids import format_id, parse_id, parse_ids
from mlm.domain.models import User, UserFilter, UserUpdate
from mlm.domain.types import ZERO_TIME
from mlm.infrastructure.database.schema import users
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


def user_from_row(row: RowMapping) -> User:
    """Map a ``users`` row to the domain model; NULL columns become zero values."""
    return User(
        id=format_id(row["id"]),
        username=row["username"],
        email=row["email"] or "",
        display_name=row["display_name"] or "",
        gender=row["gender"] or "",
        created_at=row["created_at"] or ZERO_TIME,
    )


def user_to_row(user: User) -> dict[str, Any]:
    """Map a domain user to column values; zero values are stored as NULL.

    The ``id`` key is omitted when the user has no id yet.
    """
    row: dict[str, Any] = {
        "username": user.username,
        "email": user.email or None,
        "display_name": user.display_name or None,
        "gender": user.gender or None,
        "created_at": None if user.created_at == ZERO_TIME else user.created_at,
    }
    if user.id:
        row["id"] = parse_id(user.id, kind="user")
    return row


class UserStore:
    """Query and write operations on the ``users`` table."""

    def list_users(self, conn: Connection, filter: UserFilter) -> list[User]:
        """Return zero or more users matching every present predicate.

        Raises:
            InvalidArgumentError: An id does not parse, or ordering/paging is invalid.
            QueryFailedError: The backing store rejected the query.
        """
        stmt = select(users)
        stmt = where_ids(stmt, users.c.id, filter.ids, kind="user")
        stmt = where_equal(stmt, users.c.username, filter.username)
        stmt = where_equal(stmt, users.c.email, filter.email)
        stmt = where_equal(stmt, users.c.gender, filter.gender, convert=str)
        stmt = order_and_page(
            stmt,
            users,
            order_by=filter.order_by,
            sort=filter.sort,
            limit=filter.limit,
            offset=filter.offset,
        )
        return [user_from_row(row) for row in fetch_rows(conn, stmt, kind="users")]

    def get_user(self, conn: Connection, filter: UserFilter) -> User:
        """Return exactly one user.

        Raises:
            NotFoundError: No user matched.
            AmbiguousError: More than one user matched; the filter is not
                specific enough and no match is picked arbitrarily.
        """
        results = self.list_users(conn, filter)
        if not results:
            raise NotFoundError("no user found")
        if len(results) > 1:
            raise AmbiguousError(f"expected 1 user, got {len(results)}", count=len(results))
        return results[0]

    def update(self, conn: Connection, update: UserUpdate) -> int:
        """Overwrite the present fields on every user in ``update.ids``.

        Returns the number of affected rows; 0 without touching storage
        when no field is present.

        Raises:
            InvalidArgumentError: ``ids`` is empty or an id does not parse.
            UpdateFailedError: The backing store rejected the statement.
        """
        if not update.ids:
            raise InvalidArgumentError("no user IDs provided")
        ids = parse_ids(update.ids, kind="user")

        values = collect_assignments(
            {
                "username": update.username,
                "email": update.email,
                "display_name": update.display_name,
                "gender": update.gender,
            },
            converters={"gender": str},
        )
        if not values:
            return 0  # Nothing to update
        return update_by_ids(conn, users, ids, values, kind="users")

    def bulk_insert(self, conn: Connection, new_users: Sequence[User]) -> int:
        """Insert *new_users* in a single statement; empty input is a no-op."""
        return bulk_insert_rows(conn, users, [user_to_row(u) for u in new_users])

    def insert(self, conn: Connection, user: User) -> User:
        """Insert one user and return it with its assigned id."""
        new_id = insert_one(conn, users, user_to_row(user), kind="user")
        return user.model_copy(update={"id": format_id(new_id)})

    def upsert(self, conn: Connection, user: User) -> User:
        """Insert *user* or overwrite the existing row with its id."""
        if not user.id:
            raise InvalidArgumentError("upsert user: an ID is required")
        upsert_one(conn, users, user_to_row(user), kind="user")
        return user
