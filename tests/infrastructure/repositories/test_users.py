"""Tests for UserStore — filtered listing, strict get, partial update, inserts."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from sqlalchemy import Connection, select
from sqlalchemy.exc import SQLAlchemyError

from mlm.domain.errors import (
    AmbiguousError,
    InsertFailedError,
    InvalidArgumentError,
    NotFoundError,
    QueryFailedError,
    UpdateFailedError,
)
from mlm.domain.models import User, UserFilter, UserUpdate
from mlm.domain.nullable import Value
from mlm.domain.types import ZERO_TIME, Gender
from mlm.infrastructure.database.schema import metadata, users
from mlm.infrastructure.repositories import UserStore
from tests.conftest import make_user, make_users

store = UserStore()


# ---------------------------------------------------------------------------
# list_users()
# ---------------------------------------------------------------------------


class TestListUsers:
    def test_empty_filter_returns_all(self, conn: Connection) -> None:
        make_user(conn)
        make_user(conn)
        assert len(store.list_users(conn, UserFilter())) == 2

    def test_filters_by_gender_male(self, conn: Connection) -> None:
        make_user(conn, gender="male")
        make_user(conn, gender="female")
        result = store.list_users(conn, UserFilter(gender=Value(Gender.MALE)))
        assert len(result) == 1
        assert result[0].gender == Gender.MALE

    def test_filters_by_gender_female(self, conn: Connection) -> None:
        make_user(conn, gender="male")
        make_user(conn, gender="female")
        make_user(conn, gender="female")
        result = store.list_users(conn, UserFilter(gender=Value("female")))
        assert len(result) == 2
        assert all(u.gender == "female" for u in result)

    def test_filters_by_username(self, conn: Connection) -> None:
        make_user(conn, username="alice")
        make_user(conn, username="bob")
        result = store.list_users(conn, UserFilter(username=Value("alice")))
        assert [u.username for u in result] == ["alice"]

    def test_filters_by_email(self, conn: Connection) -> None:
        make_user(conn, username="alice")
        make_user(conn, username="bob")
        result = store.list_users(conn, UserFilter(email=Value("bob@example.com")))
        assert [u.username for u in result] == ["bob"]

    def test_none_value_matches_null(self, conn: Connection) -> None:
        make_user(conn, username="alice", gender="")
        make_user(conn, username="bob", gender="male")
        result = store.list_users(conn, UserFilter(gender=Value(None)))
        assert [u.username for u in result] == ["alice"]

    def test_empty_string_is_a_real_predicate(self, conn: Connection) -> None:
        make_user(conn, username="alice")
        assert store.list_users(conn, UserFilter(username=Value(""))) == []

    def test_sorts_by_created_at_desc(self, conn: Connection) -> None:
        base = datetime(2024, 1, 1, 12, 0, 0)
        make_user(conn, username="first", created_at=base)
        make_user(conn, username="second", created_at=base + timedelta(seconds=1))
        result = store.list_users(
            conn, UserFilter(order_by=Value("created_at"), sort=Value("DESC"))
        )
        assert [u.username for u in result] == ["second", "first"]

    def test_sorts_by_username_asc(self, conn: Connection) -> None:
        for name in ("charlie", "alice", "bob"):
            make_user(conn, username=name)
        result = store.list_users(conn, UserFilter(order_by=Value("username"), sort=Value("ASC")))
        assert [u.username for u in result] == ["alice", "bob", "charlie"]

    def test_sort_defaults_to_ascending(self, conn: Connection) -> None:
        for name in ("bob", "alice"):
            make_user(conn, username=name)
        result = store.list_users(conn, UserFilter(order_by=Value("username")))
        assert [u.username for u in result] == ["alice", "bob"]

    def test_limits_results(self, conn: Connection) -> None:
        make_users(conn, 5)
        assert len(store.list_users(conn, UserFilter(limit=Value(2)))) == 2

    def test_pagination_with_offset(self, conn: Connection) -> None:
        created = make_users(conn, 5)
        result = store.list_users(
            conn,
            UserFilter(
                order_by=Value("id"), sort=Value("ASC"), limit=Value(2), offset=Value(2)
            ),
        )
        assert [u.id for u in result] == [created[2].id, created[3].id]

    def test_filters_by_ids(self, conn: Connection) -> None:
        u1 = make_user(conn)
        u2 = make_user(conn)
        make_user(conn)  # not in filter
        result = store.list_users(conn, UserFilter(ids=[u1.id, u2.id]))
        assert sorted(u.id for u in result) == sorted([u1.id, u2.id])

    def test_malformed_id_rejected(self, conn: Connection) -> None:
        make_user(conn)
        with pytest.raises(InvalidArgumentError, match="invalid user ID 'abc'"):
            store.list_users(conn, UserFilter(ids=["1", "abc"]))

    def test_id_beyond_key_range_rejected(self, conn: Connection) -> None:
        make_user(conn)
        with pytest.raises(InvalidArgumentError, match="out of range"):
            store.list_users(conn, UserFilter(ids=["18446744073709551615"]))

    def test_no_users_found(self, conn: Connection) -> None:
        assert store.list_users(conn, UserFilter(username=Value("nonexistent"))) == []

    def test_combines_multiple_filters(self, conn: Connection) -> None:
        make_user(conn, username="alice", gender="male")
        make_user(conn, username="bob", gender="male")
        make_user(conn, username="charlie", gender="female")
        result = store.list_users(
            conn,
            UserFilter(
                gender=Value(Gender.MALE),
                order_by=Value("username"),
                sort=Value("ASC"),
                limit=Value(10),
            ),
        )
        assert [u.username for u in result] == ["alice", "bob"]

    def test_unknown_order_column(self, conn: Connection) -> None:
        with pytest.raises(InvalidArgumentError, match="unknown column 'password'"):
            store.list_users(conn, UserFilter(order_by=Value("password")))

    def test_order_by_rejects_sql_text(self, conn: Connection) -> None:
        with pytest.raises(InvalidArgumentError):
            store.list_users(conn, UserFilter(order_by=Value("id; DROP TABLE users")))

    def test_invalid_sort_direction(self, conn: Connection) -> None:
        with pytest.raises(InvalidArgumentError, match="sort direction"):
            store.list_users(conn, UserFilter(order_by=Value("id"), sort=Value("sideways")))

    @pytest.mark.parametrize("field", ["limit", "offset"])
    def test_negative_paging_rejected(self, conn: Connection, field: str) -> None:
        with pytest.raises(InvalidArgumentError, match="must not be negative"):
            store.list_users(conn, UserFilter(**{field: Value(-1)}))


# ---------------------------------------------------------------------------
# get_user()
# ---------------------------------------------------------------------------


class TestGetUser:
    def test_returns_single_user(self, conn: Connection) -> None:
        created = make_user(conn, username="testuser")
        result = store.get_user(conn, UserFilter(ids=[created.id]))
        assert result.id == created.id
        assert result.username == "testuser"

    def test_no_user_found(self, conn: Connection) -> None:
        with pytest.raises(NotFoundError, match="no user found"):
            store.get_user(conn, UserFilter(username=Value("nonexistent")))

    def test_multiple_users_found(self, conn: Connection) -> None:
        make_user(conn, gender="male")
        make_user(conn, gender="male")
        with pytest.raises(AmbiguousError, match="expected 1 user, got 2") as exc_info:
            store.get_user(conn, UserFilter(gender=Value(Gender.MALE)))
        assert exc_info.value.count == 2


# ---------------------------------------------------------------------------
# update()
# ---------------------------------------------------------------------------


class TestUpdate:
    def test_updates_username(self, conn: Connection) -> None:
        created = make_user(conn, username="oldname")
        affected = store.update(conn, UserUpdate(ids=[created.id], username=Value("newname")))
        assert affected == 1
        assert store.get_user(conn, UserFilter(ids=[created.id])).username == "newname"

    def test_updates_multiple_fields(self, conn: Connection) -> None:
        created = make_user(conn, username="oldname", gender="male", display_name="Old Display")
        store.update(
            conn,
            UserUpdate(
                ids=[created.id],
                username=Value("newname"),
                gender=Value(Gender.FEMALE),
                display_name=Value("New Display"),
            ),
        )
        updated = store.get_user(conn, UserFilter(ids=[created.id]))
        assert updated.username == "newname"
        assert updated.gender == Gender.FEMALE
        assert updated.display_name == "New Display"

    def test_updates_multiple_users(self, conn: Connection) -> None:
        u1 = make_user(conn)
        u2 = make_user(conn)
        bystander = make_user(conn)
        affected = store.update(conn, UserUpdate(ids=[u1.id, u2.id], gender=Value("other")))
        assert affected == 2
        others = store.list_users(conn, UserFilter(gender=Value(Gender.OTHER)))
        assert sorted(u.id for u in others) == sorted([u1.id, u2.id])
        assert store.get_user(conn, UserFilter(ids=[bystander.id])).gender == "male"

    def test_no_ids_provided(self, conn: Connection) -> None:
        with pytest.raises(InvalidArgumentError, match="no user IDs provided"):
            store.update(conn, UserUpdate(ids=[], username=Value("newname")))

    def test_nothing_to_update(self, conn: Connection) -> None:
        created = make_user(conn)
        assert store.update(conn, UserUpdate(ids=[created.id])) == 0
        assert store.get_user(conn, UserFilter(ids=[created.id])) == created

    def test_malformed_id_fails_before_writing(self, conn: Connection) -> None:
        created = make_user(conn, username="keep")
        with pytest.raises(InvalidArgumentError):
            store.update(conn, UserUpdate(ids=[created.id, "x"], username=Value("changed")))
        assert store.get_user(conn, UserFilter(ids=[created.id])).username == "keep"

    def test_none_writes_null(self, conn: Connection) -> None:
        created = make_user(conn, display_name="Shown")
        store.update(conn, UserUpdate(ids=[created.id], display_name=Value(None)))
        row = conn.execute(select(users.c.display_name).where(users.c.id == int(created.id)))
        assert row.scalar_one() is None
        assert store.get_user(conn, UserFilter(ids=[created.id])).display_name == ""

    def test_id_beyond_key_range_rejected(self, conn: Connection) -> None:
        created = make_user(conn, username="keep")
        with pytest.raises(InvalidArgumentError, match="out of range"):
            store.update(
                conn, UserUpdate(ids=["18446744073709551615"], username=Value("x"))
            )
        assert store.get_user(conn, UserFilter(ids=[created.id])).username == "keep"

    def test_unknown_id_affects_nothing(self, conn: Connection) -> None:
        assert store.update(conn, UserUpdate(ids=["999"], username=Value("ghost"))) == 0


# ---------------------------------------------------------------------------
# bulk_insert() / insert() / upsert()
# ---------------------------------------------------------------------------


class TestInserts:
    def test_insert_then_fetch_round_trip(self, conn: Connection) -> None:
        user = User(
            username="alice",
            email="alice@example.com",
            display_name="Alice Smith",
            gender="female",
            created_at=datetime(2024, 5, 1, 9, 30, 15, 123456),
        )
        inserted = store.insert(conn, user)
        assert inserted.id
        fetched = store.get_user(conn, UserFilter(ids=[inserted.id]))
        assert fetched == inserted

    def test_insert_zero_values_stored_as_null(self, conn: Connection) -> None:
        inserted = store.insert(conn, User(username="bare"))
        row = conn.execute(select(users).where(users.c.id == int(inserted.id))).mappings().one()
        assert row["email"] is None
        assert row["created_at"] is None
        fetched = store.get_user(conn, UserFilter(ids=[inserted.id]))
        assert fetched.created_at == ZERO_TIME

    def test_duplicate_username_fails(self, conn: Connection) -> None:
        make_user(conn, username="taken")
        with pytest.raises(InsertFailedError):
            store.insert(conn, User(username="taken"))

    def test_bulk_insert(self, conn: Connection) -> None:
        count = store.bulk_insert(conn, [User(username=f"u{i}") for i in range(3)])
        assert count == 3
        assert len(store.list_users(conn, UserFilter())) == 3

    def test_bulk_insert_empty_is_noop(self, conn: Connection) -> None:
        assert store.bulk_insert(conn, []) == 0

    def test_bulk_insert_with_explicit_ids(self, conn: Connection) -> None:
        store.bulk_insert(conn, [User(id="10", username="a"), User(id="20", username="b")])
        result = store.list_users(conn, UserFilter(order_by=Value("id")))
        assert [u.id for u in result] == ["10", "20"]

    def test_bulk_insert_mixed_ids_rejected(self, conn: Connection) -> None:
        with pytest.raises(InvalidArgumentError, match="all carry ids or all omit them"):
            store.bulk_insert(conn, [User(id="10", username="a"), User(username="b")])

    def test_bulk_insert_is_all_or_nothing(self, conn: Connection) -> None:
        make_user(conn, username="dup")
        with pytest.raises(InsertFailedError):
            store.bulk_insert(conn, [User(username="fresh"), User(username="dup")])
        assert store.list_users(conn, UserFilter(username=Value("fresh"))) == []

    def test_upsert_inserts_then_overwrites(self, conn: Connection) -> None:
        store.upsert(conn, User(id="7", username="first"))
        store.upsert(conn, User(id="7", username="second", gender="other"))
        result = store.list_users(conn, UserFilter())
        assert len(result) == 1
        assert result[0].username == "second"
        assert result[0].gender == "other"

    def test_upsert_requires_id(self, conn: Connection) -> None:
        with pytest.raises(InvalidArgumentError, match="ID is required"):
            store.upsert(conn, User(username="anon"))


# ---------------------------------------------------------------------------
# Backing-store failures
# ---------------------------------------------------------------------------


@pytest.fixture
def dropped(conn: Connection) -> Connection:
    """A connection whose application tables no longer exist."""
    metadata.drop_all(conn)
    return conn


class TestBackingFailures:
    def test_list_raises_query_failed(self, dropped: Connection) -> None:
        with pytest.raises(QueryFailedError) as excinfo:
            store.list_users(dropped, UserFilter())
        assert isinstance(excinfo.value.__cause__, SQLAlchemyError)
        assert excinfo.value.code == "QUERY_FAILED"

    def test_get_raises_query_failed(self, dropped: Connection) -> None:
        with pytest.raises(QueryFailedError):
            store.get_user(dropped, UserFilter(username=Value("alice")))

    def test_update_raises_update_failed(self, dropped: Connection) -> None:
        with pytest.raises(UpdateFailedError) as excinfo:
            store.update(dropped, UserUpdate(ids=["1"], username=Value("x")))
        assert isinstance(excinfo.value.__cause__, SQLAlchemyError)
        assert excinfo.value.code == "UPDATE_FAILED"

    def test_insert_raises_insert_failed(self, dropped: Connection) -> None:
        with pytest.raises(InsertFailedError) as excinfo:
            store.insert(dropped, User(username="alice"))
        assert isinstance(excinfo.value.__cause__, SQLAlchemyError)
