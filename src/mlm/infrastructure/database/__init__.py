"""Database engine and schema via SQLAlchemy Core."""

from mlm.infrastructure.database.engine import create_db_engine, init_database
from mlm.infrastructure.database.schema import APP_TABLES, metadata, room_members, rooms, users

__all__ = [
    "APP_TABLES",
    "create_db_engine",
    "init_database",
    "metadata",
    "room_members",
    "rooms",
    "users",
]
