"""DatabaseService — recreate, reset, seed, and terraform the app database."""

from __future__ import annotations

import logging

from sqlalchemy import delete, text
from sqlalchemy.exc import SQLAlchemyError

from mlm.domain.errors import StoreError
from mlm.domain.models import Room, RoomMember, User, UserFilter
from mlm.domain.types import Gender, utcnow
from mlm.infrastructure.database.schema import APP_TABLES, metadata
from mlm.infrastructure.repositories import RoomMemberStore, RoomStore, UserStore
from mlm.services.base import BaseService
from mlm.services.migration import MigrationService
from mlm.services.result import ServiceResult

logger = logging.getLogger(__name__)

# (username, gender, display name)
SEED_USERS: tuple[tuple[str, Gender, str], ...] = (
    ("alice", Gender.FEMALE, "Alice Smith"),
    ("bob", Gender.MALE, "Bob Jones"),
    ("charlie", Gender.MALE, "Charlie Brown"),
    ("diana", Gender.FEMALE, "Diana Prince"),
    ("eve", Gender.FEMALE, "Eve Anderson"),
)
SEED_ROOM = "lobby"
SEED_ROOM_OWNER = "alice"
SEED_MEMBERS = ("alice", "bob")


class DatabaseService(BaseService):
    """Whole-database lifecycle operations."""

    def recreate(self) -> ServiceResult:
        """Drop every application table and the migration version table."""
        op = "db_recreate"
        try:
            with self._db.transaction() as conn:
                metadata.drop_all(conn)
                conn.execute(text("DROP TABLE IF EXISTS alembic_version"))
        except SQLAlchemyError as exc:
            return self._failure(op, exc, code="RECREATE_FAILED")

        dropped = [table.name for table in APP_TABLES]
        logger.info("Dropped tables: %s", ", ".join(dropped))
        return ServiceResult(ok=True, op=op, data={"dropped": [*dropped, "alembic_version"]})

    def reset(self) -> ServiceResult:
        """Delete every row, children first; the schema is kept."""
        op = "db_reset"
        deleted: dict[str, int] = {}
        try:
            with self._db.transaction() as conn:
                for table in APP_TABLES:
                    deleted[table.name] = conn.execute(delete(table)).rowcount
        except SQLAlchemyError as exc:
            return self._failure(op, exc, code="RESET_FAILED")

        return ServiceResult(ok=True, op=op, data={"deleted": deleted})

    def seed(self) -> ServiceResult:
        """Insert the fixture users, the lobby room, and its members."""
        op = "db_seed"
        now = utcnow()
        user_store = UserStore()
        try:
            with self._db.transaction() as conn:
                inserted = user_store.bulk_insert(
                    conn,
                    [
                        User(
                            username=username,
                            email=f"{username}@example.com",
                            display_name=display_name,
                            gender=gender.value,
                            created_at=now,
                        )
                        for username, gender, display_name in SEED_USERS
                    ],
                )
                by_name = {u.username: u.id for u in user_store.list_users(conn, UserFilter())}

                room = RoomStore().insert(
                    conn,
                    Room(
                        name=SEED_ROOM,
                        created_by=by_name[SEED_ROOM_OWNER],
                        is_active=True,
                        created_at=now,
                    ),
                )
                members = RoomMemberStore().bulk_insert(
                    conn,
                    [
                        RoomMember(room_id=room.id, user_id=by_name[name], joined_at=now)
                        for name in SEED_MEMBERS
                    ],
                )
        except StoreError as exc:
            return self._failure(op, exc)
        except SQLAlchemyError as exc:
            return self._failure(op, exc, code="SEED_FAILED")

        logger.info("Seeded %d users, room %s, %d members", inserted, room.id, members)
        return ServiceResult(
            ok=True,
            op=op,
            data={"users": inserted, "rooms": 1, "room_id": room.id, "members": members},
        )

    def terraform(self) -> ServiceResult:
        """Recreate, migrate to head, then seed; stops at the first failure."""
        op = "terraform"
        steps: dict[str, dict] = {}
        for name, run in (
            ("recreate", self.recreate),
            ("migrate", MigrationService(self._db).upgrade),
            ("seed", self.seed),
        ):
            result = run()
            if not result.ok:
                assert result.error is not None
                return ServiceResult(
                    ok=False,
                    op=op,
                    data={"completed": list(steps)},
                    error=result.error.model_copy(update={"detail": {"step": name}}),
                )
            steps[name] = result.data
        return ServiceResult(ok=True, op=op, data=steps)
