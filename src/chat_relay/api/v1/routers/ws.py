from __future__ import annotations

import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from chat_relay.api.deps import BlobStoreDep, ManagerDep, UoWFactoryDep, VerifierDep
from chat_relay.application.exceptions import ProtocolError
from chat_relay.application.ports.blob import BlobStore
from chat_relay.application.uow import UnitOfWorkFactory
from chat_relay.config import settings
from chat_relay.domain.value_objects.enums import InboundFrameType
from chat_relay.infrastructure.ws.connection import Connection
from chat_relay.infrastructure.ws.manager import ConnectionManager
from chat_relay.infrastructure.ws.protocol import ChatMessageIn, parse_inbound
from chat_relay.services import identity_service, message_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


@router.websocket("/ws")
async def ws_relay(
    websocket: WebSocket,
    manager: ManagerDep,
    verifier: VerifierDep,
    blobs: BlobStoreDep,
    uow_factory: UoWFactoryDep,
    token: str | None = Query(None),
) -> None:
    credential = identity_service.token_from_cookie_header(
        websocket.headers.get("cookie"), settings.AUTH_COOKIE_NAME,
    ) or token
    identity = await identity_service.resolve_identity(credential, verifier)

    await websocket.accept()
    connection = Connection(websocket, identity, queue_size=settings.WS_SEND_QUEUE_SIZE)
    connection.start_inbound(
        lambda conn, frame: _handle_send(conn, frame, manager, blobs, uow_factory),
    )
    manager.connect(connection)
    try:
        await _read_loop(websocket, connection)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %r", connection)
    finally:
        manager.disconnect(connection)
        await connection.wait_closed()


async def _read_loop(ws: WebSocket, connection: Connection) -> None:
    """Read frames until close; pongs are handled inline, chat frames are queued."""
    while not connection.closed:
        message = await ws.receive()
        if message["type"] == "websocket.disconnect":
            raise WebSocketDisconnect(message.get("code", 1000))
        raw = message.get("text")
        if raw is None:
            raw = (message.get("bytes") or b"").decode("utf-8", errors="replace")

        try:
            frame = parse_inbound(raw)
        except ProtocolError as exc:
            logger.debug("Dropping malformed frame from %r: %s", connection, exc.detail)
            continue

        if isinstance(frame, ChatMessageIn):
            connection.submit(frame)
        elif frame.type == InboundFrameType.PONG:
            connection.pong_received()
        elif frame.type == InboundFrameType.CLOSE:
            return


async def _handle_send(
    connection: Connection,
    frame: ChatMessageIn,
    manager: ConnectionManager,
    blobs: BlobStore,
    uow_factory: UnitOfWorkFactory,
) -> None:
    try:
        async with uow_factory() as uow:
            msg = await message_service.send_message(
                connection.identity, frame.to_outgoing(), uow, blobs,
            )
    except Exception:
        logger.exception("Message persistence failed for %r", connection)
        return

    if msg is not None:
        manager.deliver(msg)
