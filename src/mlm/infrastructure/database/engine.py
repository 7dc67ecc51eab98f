"""Database engine setup.

Any SQLAlchemy URL is accepted (SQLite for local work and tests, MySQL
in deployment).  SQLite connections get ``PRAGMA foreign_keys=ON`` so
``rooms.created_by`` and ``room_members`` references are enforced the
same way the server engines enforce them.

SQLAlchemy Core (not ORM) is used: stores build statements from the
table metadata and run them on a caller-supplied ``Connection``.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url

from mlm.infrastructure.database.schema import metadata


def create_db_engine(url: str) -> Engine:
    """Create an engine for *url*, enabling foreign keys on SQLite."""
    engine = create_engine(url, echo=False, pool_pre_ping=True)

    if make_url(url).get_backend_name() == "sqlite":

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def init_database(engine: Engine) -> Engine:
    """Create all application tables from :data:`schema.metadata`.

    Idempotent — existing tables are left untouched.  Migrations are the
    normal path; this is for tests and throwaway databases.
    """
    metadata.create_all(engine)
    return engine
