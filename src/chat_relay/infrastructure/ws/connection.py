"""Lifecycle object for a single relay WebSocket."""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Awaitable, Callable
from uuid import UUID

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from chat_relay.application.dto.identity import Identity
from chat_relay.domain.value_objects.enums import LivenessState
from chat_relay.infrastructure.ws.heartbeat import HeartbeatMonitor
from chat_relay.infrastructure.ws.protocol import PING_FRAME, ChatMessageIn

logger = logging.getLogger(__name__)

ConnectionCallback = Callable[["Connection"], None]
InboundHandler = Callable[["Connection", ChatMessageIn], Awaitable[None]]


class Connection:
    """A live socket, the identity bound to it, and its outbound queue.

    All writes go through ``send``, which only enqueues; a dedicated writer
    task drains the queue so one slow peer never blocks a broadcast. Chat
    frames read from the socket go through ``submit`` to a dispatcher task,
    in receipt order, so a slow store write never delays reading a pong.
    """

    def __init__(
        self,
        websocket: WebSocket,
        identity: Identity | None = None,
        *,
        queue_size: int = 256,
    ) -> None:
        self.id: UUID = uuid.uuid4()
        self.identity = identity
        self._websocket = websocket
        self._outbox: asyncio.Queue[str] = asyncio.Queue(maxsize=queue_size)
        self._writer: asyncio.Task[None] | None = None
        self._inbox: asyncio.Queue[ChatMessageIn | None] = asyncio.Queue()
        self._inbox_limit = queue_size
        self._dispatcher: asyncio.Task[None] | None = None
        self._closer: asyncio.Task[None] | None = None
        self._heartbeat: HeartbeatMonitor | None = None
        self._on_broken: ConnectionCallback | None = None
        self._closed = False

    def __repr__(self) -> str:
        who = self.identity.username if self.identity else "anonymous"
        return f"<Connection {self.id.hex[:8]} {who}>"

    @property
    def user_id(self) -> UUID | None:
        return self.identity.user_id if self.identity else None

    @property
    def username(self) -> str | None:
        return self.identity.username if self.identity else None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def liveness(self) -> LivenessState:
        if self._closed:
            return LivenessState.DEAD
        if self._heartbeat is None:
            return LivenessState.ALIVE
        return self._heartbeat.state

    @property
    def last_pong_at(self) -> float | None:
        return self._heartbeat.last_pong_at if self._heartbeat else None

    def start(
        self,
        *,
        on_dead: ConnectionCallback,
        on_broken: ConnectionCallback,
        heartbeat_interval: float,
        heartbeat_timeout: float,
    ) -> None:
        self._on_broken = on_broken
        self._writer = asyncio.create_task(self._drain(), name=f"ws-writer-{self.id.hex[:8]}")
        self._heartbeat = HeartbeatMonitor(
            send_ping=lambda: self.send(PING_FRAME),
            on_dead=lambda: on_dead(self),
            interval=heartbeat_interval,
            timeout=heartbeat_timeout,
            name=repr(self),
        )
        self._heartbeat.start()

    def start_inbound(self, handler: InboundHandler) -> None:
        self._dispatcher = asyncio.create_task(
            self._dispatch(handler), name=f"ws-inbound-{self.id.hex[:8]}",
        )

    def submit(self, frame: ChatMessageIn) -> bool:
        """Queue an inbound chat frame for the dispatcher. Returns False if dropped."""
        if self._closed:
            return False
        if self._inbox.qsize() >= self._inbox_limit:
            logger.warning("Inbound queue full, dropping frame from %r", self)
            return False
        self._inbox.put_nowait(frame)
        return True

    def send(self, frame: str) -> bool:
        """Queue ``frame`` for delivery. Returns False if it was not accepted."""
        if self._closed:
            return False
        try:
            self._outbox.put_nowait(frame)
        except asyncio.QueueFull:
            logger.warning("Outbound queue full, dropping frame for %r", self)
            return False
        return True

    def pong_received(self) -> None:
        if self._heartbeat is not None:
            self._heartbeat.pong_received()

    def close(self, code: int = 1000, reason: str = "") -> None:
        """Stop timers and the writer now; the transport close runs in the background."""
        if self._closed:
            return
        self._closed = True
        if self._heartbeat is not None:
            self._heartbeat.stop()
        if self._writer is not None and self._writer is not asyncio.current_task():
            self._writer.cancel()
        if self._dispatcher is not None:
            # frames already read are still handled, then the dispatcher exits
            self._inbox.put_nowait(None)
        if (
            self._websocket.application_state == WebSocketState.CONNECTED
            and self._websocket.client_state == WebSocketState.CONNECTED
        ):
            self._closer = asyncio.create_task(
                self._close_transport(code, reason),
                name=f"ws-close-{self.id.hex[:8]}",
            )

    async def wait_closed(self) -> None:
        if self._dispatcher is not None and self._dispatcher is not asyncio.current_task():
            await self._dispatcher
        if self._closer is not None:
            await self._closer

    async def _drain(self) -> None:
        while True:
            frame = await self._outbox.get()
            try:
                await self._websocket.send_text(frame)
            except Exception:
                logger.debug("Send failed for %r", self, exc_info=True)
                if self._on_broken is not None:
                    self._on_broken(self)
                return

    async def _dispatch(self, handler: InboundHandler) -> None:
        while True:
            frame = await self._inbox.get()
            if frame is None:
                return
            try:
                await handler(self, frame)
            except Exception:
                logger.exception("Inbound frame from %r failed", self)

    async def _close_transport(self, code: int, reason: str) -> None:
        try:
            await self._websocket.close(code=code, reason=reason)
        except Exception:
            logger.debug("Close failed for %r", self, exc_info=True)
