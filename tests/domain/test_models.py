"""Tests for entity models and filter/update defaults."""

import dataclasses

import pytest
from pydantic import ValidationError

from mlm.domain.models import (
    Room,
    RoomFilter,
    RoomMember,
    RoomMemberUpdate,
    User,
    UserFilter,
    UserUpdate,
)
from mlm.domain.nullable import UNSET
from mlm.domain.types import ZERO_TIME, Gender, SortDirection


class TestEntities:
    def test_user_zero_values(self) -> None:
        user = User(username="alice")
        assert user.id == ""
        assert user.email == ""
        assert user.gender == ""
        assert user.created_at == ZERO_TIME

    def test_user_frozen(self) -> None:
        user = User(username="alice")
        with pytest.raises(ValidationError):
            user.username = "bob"  # type: ignore[misc]

    def test_room_requires_owner(self) -> None:
        with pytest.raises(ValidationError):
            Room(name="lobby")  # type: ignore[call-arg]

    def test_member_defaults(self) -> None:
        member = RoomMember(room_id="1", user_id="2")
        assert member.left_at == ZERO_TIME


class TestFilters:
    def test_every_field_unset_by_default(self) -> None:
        f = UserFilter()
        assert f.ids == []
        for field in dataclasses.fields(f):
            if field.name != "ids":
                assert getattr(f, field.name) is UNSET, field.name

    def test_ids_not_shared_between_instances(self) -> None:
        assert RoomFilter().ids is not RoomFilter().ids

    def test_updates_default_unset(self) -> None:
        assert UserUpdate().username is UNSET
        assert RoomMemberUpdate().left_at is UNSET


class TestEnums:
    def test_gender_values(self) -> None:
        assert {g.value for g in Gender} == {"male", "female", "other"}

    def test_gender_is_str(self) -> None:
        assert Gender.MALE == "male"

    def test_sort_direction(self) -> None:
        assert SortDirection("desc") is SortDirection.DESC
