from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from chat_relay.domain.entities.message import Message


class MessageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID = Field(alias="_id")
    sender: UUID
    recipient: UUID
    text: str | None
    file: str | None
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_entity(cls, msg: Message) -> MessageResponse:
        return cls(
            id=msg.id,
            sender=msg.sender_id,
            recipient=msg.recipient_id,
            text=msg.text,
            file=msg.file,
            created_at=msg.created_at,
        )
