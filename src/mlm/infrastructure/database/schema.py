"""SQLAlchemy Core table definitions for the music app database.

The Alembic revisions under ``migrations/versions`` must produce exactly
this schema; tests build it directly with ``metadata.create_all``.
"""

from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
)

metadata = MetaData()

# Signed 64-bit keys; SQLite only autoincrements a plain INTEGER primary key.
KEY = BigInteger().with_variant(Integer, "sqlite")

users = Table(
    "users",
    metadata,
    Column("id", KEY, primary_key=True, autoincrement=True),
    Column("username", Text, nullable=False, unique=True),
    Column("email", Text),
    Column("display_name", Text),
    Column("gender", Text),  # male | female | other
    Column("created_at", DateTime),
)

rooms = Table(
    "rooms",
    metadata,
    Column("id", KEY, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("created_by", KEY, ForeignKey("users.id"), nullable=False),
    Column("is_active", Boolean),
    Column("created_at", DateTime),
)

room_members = Table(
    "room_members",
    metadata,
    Column("id", KEY, primary_key=True, autoincrement=True),
    Column("room_id", KEY, ForeignKey("rooms.id"), nullable=False),
    Column("user_id", KEY, ForeignKey("users.id"), nullable=False),
    Column("joined_at", DateTime),
    Column("left_at", DateTime),  # NULL while the member is still in the room
)

Index("ix_rooms_created_by", rooms.c.created_by)
Index("ix_room_members_room", room_members.c.room_id)
Index("ix_room_members_user", room_members.c.user_id)

# Children first; used for ordered DELETE/DROP.
APP_TABLES = (room_members, rooms, users)
