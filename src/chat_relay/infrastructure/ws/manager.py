"""In-process relay: connection lifecycle, presence and delivery."""
from __future__ import annotations

import logging

from chat_relay.domain.entities.message import Message
from chat_relay.infrastructure.ws.connection import Connection
from chat_relay.infrastructure.ws.presence import PresenceBroadcaster
from chat_relay.infrastructure.ws.protocol import message_frame
from chat_relay.infrastructure.ws.registry import ConnectionRegistry

logger = logging.getLogger(__name__)

WS_CLOSE_NORMAL = 1000
WS_CLOSE_GOING_AWAY = 1001
WS_CLOSE_INTERNAL_ERROR = 1011
WS_CLOSE_HEARTBEAT_TIMEOUT = 4408


class ConnectionManager:
    """Owns the registry and every path into and out of it.

    Each removal path (client close, send failure, heartbeat death,
    shutdown) funnels through ``disconnect`` so teardown and the follow-up
    presence broadcast happen exactly once per connection.
    """

    def __init__(
        self,
        registry: ConnectionRegistry | None = None,
        *,
        heartbeat_interval: float = 5.0,
        heartbeat_timeout: float = 1.0,
    ) -> None:
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.presence = PresenceBroadcaster(self.registry)
        self._heartbeat_interval = heartbeat_interval
        self._heartbeat_timeout = heartbeat_timeout

    def connect(self, connection: Connection) -> None:
        self.registry.add(connection)
        connection.start(
            on_dead=self._on_heartbeat_death,
            on_broken=self._on_transport_failure,
            heartbeat_interval=self._heartbeat_interval,
            heartbeat_timeout=self._heartbeat_timeout,
        )
        logger.info("WS connected: %r (total=%d)", connection, len(self.registry))
        self.notify_all()

    def disconnect(
        self,
        connection: Connection,
        *,
        code: int = WS_CLOSE_NORMAL,
        reason: str = "",
    ) -> bool:
        """Remove and close ``connection``. Returns False if it was already gone."""
        if not self.registry.remove(connection):
            return False
        connection.close(code, reason)
        logger.info("WS disconnected: %r (total=%d)", connection, len(self.registry))
        self.notify_all()
        return True

    def notify_all(self) -> int:
        return self.presence.notify_all()

    def deliver(self, message: Message) -> int:
        """Forward ``message`` to every live connection of its recipient."""
        targets = self.registry.find_by_user_id(message.recipient_id)
        if not targets:
            logger.debug("Recipient %s offline, message %s stored only", message.recipient_id, message.id)
            return 0
        raw = message_frame(message)
        return sum(1 for conn in targets if conn.send(raw))

    def close_all(self) -> None:
        for conn in self.registry.list_all():
            if self.registry.remove(conn):
                conn.close(WS_CLOSE_GOING_AWAY, "server shutdown")

    def _on_heartbeat_death(self, connection: Connection) -> None:
        self.disconnect(connection, code=WS_CLOSE_HEARTBEAT_TIMEOUT, reason="heartbeat timeout")

    def _on_transport_failure(self, connection: Connection) -> None:
        self.disconnect(connection, code=WS_CLOSE_INTERNAL_ERROR, reason="send failed")
