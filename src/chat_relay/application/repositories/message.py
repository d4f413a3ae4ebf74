from __future__ import annotations

from typing import Protocol
from uuid import UUID

from chat_relay.domain.entities.message import Message


class MessageReader(Protocol):
    async def list_between(
        self,
        user_a: UUID,
        user_b: UUID,
        *,
        cursor: str | None = None,
        limit: int = 100,
    ) -> list[Message]:
        """Messages exchanged by the two users, oldest first."""
        ...


class MessageWriter(Protocol):
    async def create(
        self,
        sender_id: UUID,
        recipient_id: UUID,
        text: str | None,
        file: str | None,
    ) -> Message:
        """Insert a message. The store assigns its id and creation time."""
        ...
