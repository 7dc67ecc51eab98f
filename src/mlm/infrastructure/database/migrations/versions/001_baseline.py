"""Baseline schema — users, rooms, room_members.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-09-14
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None

KEY = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", KEY, primary_key=True, autoincrement=True),
        sa.Column("username", sa.Text, nullable=False, unique=True),
        sa.Column("display_name", sa.Text),
        sa.Column("gender", sa.Text),
        sa.Column("created_at", sa.DateTime),
    )

    op.create_table(
        "rooms",
        sa.Column("id", KEY, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("created_by", KEY, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("is_active", sa.Boolean),
        sa.Column("created_at", sa.DateTime),
    )
    op.create_index("ix_rooms_created_by", "rooms", ["created_by"])

    op.create_table(
        "room_members",
        sa.Column("id", KEY, primary_key=True, autoincrement=True),
        sa.Column("room_id", KEY, sa.ForeignKey("rooms.id"), nullable=False),
        sa.Column("user_id", KEY, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("joined_at", sa.DateTime),
        sa.Column("left_at", sa.DateTime),
    )
    op.create_index("ix_room_members_room", "room_members", ["room_id"])
    op.create_index("ix_room_members_user", "room_members", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_room_members_user", table_name="room_members")
    op.drop_index("ix_room_members_room", table_name="room_members")
    op.drop_table("room_members")
    op.drop_index("ix_rooms_created_by", table_name="rooms")
    op.drop_table("rooms")
    op.drop_table("users")
