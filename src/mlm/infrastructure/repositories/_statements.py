"""Statement-building and execution helpers shared by the entity stores.

The ``where_*``/``order_and_page`` helpers take a statement and return it
narrowed; fields that are :data:`~mlm.domain.nullable.UNSET` leave the
statement untouched.  All values are bound parameters — column names
come from table metadata, never from caller text.

The execution helpers run exactly one statement on the caller's
connection and translate ``SQLAlchemyError`` into the store taxonomy.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy import ColumnElement, Table, insert, update
from sqlalchemy.exc import SQLAlchemyError

from mlm.domain.errors import (
    InsertFailedError,
    InvalidArgumentError,
    QueryFailedError,
    UpdateFailedError,
)
from mlm.domain.ids import parse_ids
from mlm.domain.nullable import Nullable, is_set, value_or
from mlm.domain.types import SortDirection

if TYPE_CHECKING:
    from sqlalchemy import Connection, Select
    from sqlalchemy.engine import RowMapping

logger = logging.getLogger(__name__)

S = TypeVar("S")


def where_ids(stmt: S, column: ColumnElement[Any], ids: Sequence[str], *, kind: str) -> S:
    """Restrict *stmt* to ``column IN ids`` when *ids* is non-empty."""
    if not ids:
        return stmt
    return stmt.where(column.in_(parse_ids(ids, kind=kind)))  # type: ignore[attr-defined]


def where_equal(
    stmt: S,
    column: ColumnElement[Any],
    field: Nullable[Any],
    *,
    convert: Callable[[Any], Any] | None = None,
) -> S:
    """Add ``column = value`` when *field* is set (``IS NULL`` for ``Value(None)``)."""
    if not is_set(field):
        return stmt
    value = field.value
    if convert is not None and value is not None:
        value = convert(value)
    return stmt.where(column == value)  # type: ignore[attr-defined]


def order_and_page(
    stmt: Select[Any],
    table: Table,
    *,
    order_by: Nullable[str],
    sort: Nullable[str],
    limit: Nullable[int],
    offset: Nullable[int],
) -> Select[Any]:
    """Apply ORDER BY, then LIMIT/OFFSET.

    Raises:
        InvalidArgumentError: Unknown column, unknown direction, or a
            negative limit/offset.
    """
    if is_set(order_by):
        column = table.c.get(order_by.value)
        if column is None:
            msg = f"cannot order {table.name} by unknown column {order_by.value!r}"
            raise InvalidArgumentError(msg)
        direction = SortDirection.ASC
        raw_sort = value_or(sort, "")
        if raw_sort:
            try:
                direction = SortDirection(raw_sort.lower())
            except ValueError as exc:
                msg = f"invalid sort direction {raw_sort!r}: expected asc or desc"
                raise InvalidArgumentError(msg) from exc
        stmt = stmt.order_by(column.desc() if direction is SortDirection.DESC else column.asc())

    if is_set(limit):
        if limit.value < 0:
            msg = f"limit must not be negative, got {limit.value}"
            raise InvalidArgumentError(msg)
        stmt = stmt.limit(limit.value)
    if is_set(offset):
        if offset.value < 0:
            msg = f"offset must not be negative, got {offset.value}"
            raise InvalidArgumentError(msg)
        stmt = stmt.offset(offset.value)
    return stmt


def collect_assignments(
    fields: Mapping[str, Nullable[Any]],
    *,
    converters: Mapping[str, Callable[[Any], Any]] | None = None,
) -> dict[str, Any]:
    """Build the ``SET`` mapping from the fields that are present."""
    converters = converters or {}
    values: dict[str, Any] = {}
    for name, field in fields.items():
        if not is_set(field):
            continue
        value = field.value
        convert = converters.get(name)
        if convert is not None and value is not None:
            value = convert(value)
        values[name] = value
    return values


def fetch_rows(conn: Connection, stmt: Select[Any], *, kind: str) -> list[RowMapping]:
    """Execute a SELECT, wrapping backing-store failures."""
    try:
        return list(conn.execute(stmt).mappings().all())
    except SQLAlchemyError as exc:
        logger.warning("Query on %s failed: %s", kind, exc)
        raise QueryFailedError(f"query {kind}: {exc}") from exc


def bulk_insert_rows(conn: Connection, table: Table, rows: list[dict[str, Any]]) -> int:
    """Insert *rows* with one multi-row ``INSERT ... VALUES`` statement.

    All rows must share the same column set — either every row carries an
    ``id`` or none does (the database assigns them).
    """
    if not rows:
        return 0
    keys = set(rows[0])
    if any(set(row) != keys for row in rows[1:]):
        msg = f"bulk insert into {table.name}: rows must all carry ids or all omit them"
        raise InvalidArgumentError(msg)

    logger.debug("Bulk insert into %s: %d rows", table.name, len(rows))
    try:
        result = conn.execute(insert(table).values(rows))
    except SQLAlchemyError as exc:
        logger.warning("Bulk insert into %s failed: %s", table.name, exc)
        raise InsertFailedError(f"bulk insert {table.name}: {exc}") from exc
    return result.rowcount


def update_by_ids(
    conn: Connection, table: Table, ids: list[int], values: dict[str, Any], *, kind: str
) -> int:
    """Run ``UPDATE table SET ... WHERE id IN (ids)`` and return the row count."""
    stmt = update(table).where(table.c.id.in_(ids)).values(**values)
    logger.debug("Update %s: %d ids, columns=%s", kind, len(ids), sorted(values))
    try:
        result = conn.execute(stmt)
    except SQLAlchemyError as exc:
        logger.warning("Update on %s failed: %s", kind, exc)
        raise UpdateFailedError(f"update {kind}: {exc}") from exc
    return result.rowcount


def insert_one(conn: Connection, table: Table, row: dict[str, Any], *, kind: str) -> int:
    """Insert a single row and return its primary key."""
    try:
        result = conn.execute(insert(table).values(**row))
    except SQLAlchemyError as exc:
        logger.warning("Insert into %s failed: %s", table.name, exc)
        raise InsertFailedError(f"insert {kind}: {exc}") from exc
    return int(result.inserted_primary_key[0])


def upsert_one(conn: Connection, table: Table, row: dict[str, Any], *, kind: str) -> None:
    """Insert *row*, or overwrite the existing row with the same ``id``.

    Uses the dialect's native conflict clause; only SQLite, PostgreSQL and
    MySQL/MariaDB are supported.
    """
    if "id" not in row:
        msg = f"upsert {kind}: an ID is required"
        raise InvalidArgumentError(msg)
    changes = [name for name in row if name != "id"]
    dialect = conn.dialect.name

    if dialect in ("sqlite", "postgresql"):
        if dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert as dialect_insert
        else:
            from sqlalchemy.dialects.postgresql import insert as dialect_insert
        stmt = dialect_insert(table).values(**row)
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.id],
            set_={name: stmt.excluded[name] for name in changes},
        )
    elif dialect in ("mysql", "mariadb"):
        from sqlalchemy.dialects.mysql import insert as mysql_insert

        stmt = mysql_insert(table).values(**row)
        stmt = stmt.on_duplicate_key_update({name: stmt.inserted[name] for name in changes})
    else:
        msg = f"upsert {kind}: unsupported dialect {dialect!r}"
        raise InsertFailedError(msg)

    try:
        conn.execute(stmt)
    except SQLAlchemyError as exc:
        logger.warning("Upsert into %s failed: %s", table.name, exc)
        raise InsertFailedError(f"upsert {kind}: {exc}") from exc
