from __future__ import annotations

from typing import Protocol
from uuid import UUID

from chat_relay.domain.entities.user import User


class UserReader(Protocol):
    async def get_by_id(self, user_id: UUID) -> User | None: ...

    async def get_by_username(self, username: str) -> User | None: ...

    async def list_all(self) -> list[User]: ...


class UserWriter(Protocol):
    async def create(self, username: str, password_hash: str) -> User: ...
