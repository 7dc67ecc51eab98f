"""Shared pytest fixtures and test helpers for mlm tests."""

from __future__ import annotations

import itertools
import os
from collections.abc import Iterator
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy import Connection
from sqlalchemy.engine import Engine

from mlm.domain.models import Room, RoomMember, User
from mlm.domain.types import utcnow
from mlm.infrastructure.app_db import AppDatabase
from mlm.infrastructure.database.engine import create_db_engine, init_database
from mlm.infrastructure.repositories import RoomMemberStore, RoomStore, UserStore


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Iterator[Engine]:
    """SQLite engine on a temp file with every table created from metadata."""
    engine = init_database(create_db_engine(f"sqlite:///{tmp_path / 'test.db'}"))
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def conn(db_engine: Engine) -> Iterator[Connection]:
    """A connection inside one transaction, as a service would hand to a store."""
    with db_engine.begin() as connection:
        yield connection


@pytest.fixture
def app_db(tmp_path: Path) -> Iterator[AppDatabase]:
    """AppDatabase on an empty temp SQLite file (no tables, no migrations)."""
    db = AppDatabase(f"sqlite:///{tmp_path / 'app.db'}")
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def migrated_db(app_db: AppDatabase) -> AppDatabase:
    """AppDatabase migrated to head."""
    from mlm.services.migration import MigrationService

    result = MigrationService(app_db).upgrade()
    assert result.ok, result.error
    return app_db


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Change CWD to a temp directory and clear mlm environment overrides.

    The CLI then resolves its default SQLite file (``mlm.db``) inside
    *tmp_path*.  Use via ``@pytest.mark.usefixtures("_isolated_project")``.
    """
    for key in list(os.environ):
        if key.startswith("MUSICAPP_"):
            monkeypatch.delenv(key)
    monkeypatch.delenv("MLM_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Factory helpers (insert rows through the stores)
# ---------------------------------------------------------------------------

_seq = itertools.count(1)


def make_user(conn: Connection, **mods: Any) -> User:
    """Insert a user with unique defaults; *mods* override any field."""
    n = next(_seq)
    username = mods.pop("username", f"user_{n}")
    fields: dict[str, Any] = {
        "username": username,
        "email": f"{username}@example.com",
        "display_name": f"User {n}",
        "gender": "male",
        "created_at": utcnow(),
    }
    fields.update(mods)
    return UserStore().insert(conn, User(**fields))


def make_users(conn: Connection, count: int, **mods: Any) -> list[User]:
    """Insert *count* users with strictly increasing ``created_at``."""
    base: datetime = mods.pop("created_at", utcnow())
    return [
        make_user(conn, created_at=base + timedelta(seconds=i), **mods) for i in range(count)
    ]


def make_room(conn: Connection, owner: User, **mods: Any) -> Room:
    fields: dict[str, Any] = {
        "name": f"room_{next(_seq)}",
        "created_by": owner.id,
        "is_active": True,
        "created_at": utcnow(),
    }
    fields.update(mods)
    return RoomStore().insert(conn, Room(**fields))


def make_member(conn: Connection, room: Room, user: User, **mods: Any) -> RoomMember:
    fields: dict[str, Any] = {"room_id": room.id, "user_id": user.id, "joined_at": utcnow()}
    fields.update(mods)
    return RoomMemberStore().insert(conn, RoomMember(**fields))
