"""Entity stores over the ``users``, ``rooms`` and ``room_members`` tables."""

from mlm.infrastructure.repositories.room_members import RoomMemberStore
from mlm.infrastructure.repositories.rooms import RoomStore
from mlm.infrastructure.repositories.users import UserStore

__all__ = ["RoomMemberStore", "RoomStore", "UserStore"]
