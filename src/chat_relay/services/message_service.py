from __future__ import annotations

import base64
import logging
import secrets
import uuid
from datetime import datetime

from chat_relay.application.dto.identity import Identity
from chat_relay.application.dto.message import FileUpload, OutgoingMessage
from chat_relay.application.exceptions import StorageError
from chat_relay.application.ports.blob import BlobStore
from chat_relay.application.ports.clock import Clock, SystemClock
from chat_relay.application.uow import UnitOfWork
from chat_relay.domain.entities.message import Message

logger = logging.getLogger(__name__)

_clock = SystemClock()


async def send_message(
    sender: Identity | None,
    outgoing: OutgoingMessage,
    uow: UnitOfWork,
    blobs: BlobStore,
    clock: Clock = _clock,
) -> Message | None:
    """Validate, store the attachment and persist a message.

    Returns None when the message is dropped. The sender always comes from
    the authenticated connection, never from the frame.
    """
    if sender is None:
        logger.debug("Dropping message from anonymous connection")
        return None

    text = outgoing.text or None
    if outgoing.recipient_id is None or (text is None and outgoing.file is None):
        logger.debug("Dropping incomplete message from %s", sender.user_id)
        return None

    file_name: str | None = None
    if outgoing.file is not None:
        file_name = await store_attachment(outgoing.file, blobs, clock)

    msg = await uow.messages_w.create(sender.user_id, outgoing.recipient_id, text, file_name)
    await uow.commit()
    return msg


async def list_conversation(
    identity: Identity,
    other_user_id: uuid.UUID,
    cursor: str | None,
    limit: int,
    uow: UnitOfWork,
) -> list[Message]:
    return await uow.messages.list_between(
        identity.user_id, other_user_id, cursor=cursor, limit=limit,
    )


def attachment_name(original: str, now: datetime) -> str:
    """``<epoch millis>-<random>.<ext>``; the extension keeps only alphanumerics."""
    ext = original.rsplit(".", 1)[-1] if "." in original else ""
    ext = "".join(ch for ch in ext if ch.isascii() and ch.isalnum())
    stem = f"{int(now.timestamp() * 1000)}-{secrets.token_hex(4)}"
    return f"{stem}.{ext}" if ext else stem


def decode_attachment(data: str) -> bytes:
    """Decode base64 content, with or without a ``data:...;base64,`` prefix."""
    _, sep, encoded = data.partition(",")
    return base64.b64decode(encoded if sep else data, validate=True)


async def store_attachment(upload: FileUpload, blobs: BlobStore, clock: Clock) -> str | None:
    try:
        content = decode_attachment(upload.data)
    except ValueError:
        logger.warning("Undecodable attachment %r dropped", upload.name)
        return None

    name = attachment_name(upload.name, clock.now())
    try:
        await blobs.write(name, content)
    except StorageError:
        logger.exception("Error saving attachment %s", name)
        return None
    return name
