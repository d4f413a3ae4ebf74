"""Presence snapshots pushed to every live connection."""
from __future__ import annotations

import logging
from typing import Iterable
from uuid import UUID

from chat_relay.application.dto.identity import Identity
from chat_relay.infrastructure.ws.connection import Connection
from chat_relay.infrastructure.ws.protocol import presence_frame
from chat_relay.infrastructure.ws.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


def _online(connections: Iterable[Connection]) -> list[Identity]:
    seen: dict[UUID, Identity] = {}
    for conn in connections:
        if conn.identity is not None:
            seen.setdefault(conn.identity.user_id, conn.identity)
    return list(seen.values())


class PresenceBroadcaster:
    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry

    def snapshot(self) -> list[Identity]:
        """Bound identities of all live connections, one entry per user."""
        return _online(self._registry.list_all())

    def notify_all(self) -> int:
        """Send the full snapshot to every connection. Returns how many accepted it."""
        connections = self._registry.list_all()
        online = _online(connections)
        raw = presence_frame(online)
        sent = sum(1 for conn in connections if conn.send(raw))
        logger.debug("Presence broadcast: %d online, %d recipients", len(online), sent)
        return sent
