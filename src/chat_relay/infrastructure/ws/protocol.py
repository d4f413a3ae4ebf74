"""WebSocket frame models.

Inbound frames are JSON objects. ``{"type": "pong"}`` and ``{"type": "close"}``
are control frames; anything else (no ``type`` or ``"message"``) is a chat
message. Outbound frames keep the shapes browser clients already read:
``{"online": [...]}``, ``{"_id", "sender", ...}`` and ``{"type": "ping"}``.
"""
from __future__ import annotations

import json
from typing import Iterable
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from chat_relay.application.dto.identity import Identity
from chat_relay.application.dto.message import FileUpload, OutgoingMessage
from chat_relay.application.exceptions import ProtocolError
from chat_relay.domain.entities.message import Message
from chat_relay.domain.value_objects.enums import InboundFrameType


class FileIn(BaseModel):
    name: str
    data: str


class ChatMessageIn(BaseModel):
    """Client → Server chat message. Completeness is checked by the router, not here."""

    recipient: UUID | None = None
    text: str | None = None
    file: FileIn | None = None

    def to_outgoing(self) -> OutgoingMessage:
        return OutgoingMessage(
            recipient_id=self.recipient,
            text=self.text,
            file=FileUpload(name=self.file.name, data=self.file.data) if self.file else None,
        )


class ControlIn(BaseModel):
    type: InboundFrameType


InboundFrame = ChatMessageIn | ControlIn


def parse_inbound(raw: str) -> InboundFrame:
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise ProtocolError("frame is not valid JSON") from exc
    if not isinstance(data, dict):
        raise ProtocolError("frame must be a JSON object")

    try:
        if data.get("type", InboundFrameType.MESSAGE) == InboundFrameType.MESSAGE:
            return ChatMessageIn.model_validate(data)
        return ControlIn.model_validate(data)
    except PydanticValidationError as exc:
        raise ProtocolError(f"invalid frame: {exc.error_count()} error(s)") from exc


class PresenceEntryOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: UUID = Field(alias="userId")
    username: str


class PresenceOut(BaseModel):
    online: list[PresenceEntryOut]


class MessageOut(BaseModel):
    """Server → Client delivered message."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID = Field(alias="_id")
    sender: UUID
    recipient: UUID
    text: str | None = None
    file: str | None = None


class PingOut(BaseModel):
    type: str = "ping"


def presence_frame(online: Iterable[Identity]) -> str:
    payload = PresenceOut(
        online=[PresenceEntryOut(user_id=i.user_id, username=i.username) for i in online],
    )
    return payload.model_dump_json(by_alias=True)


def message_frame(message: Message) -> str:
    payload = MessageOut(
        id=message.id,
        sender=message.sender_id,
        recipient=message.recipient_id,
        text=message.text,
        file=message.file,
    )
    return payload.model_dump_json(by_alias=True)


PING_FRAME = PingOut().model_dump_json()
