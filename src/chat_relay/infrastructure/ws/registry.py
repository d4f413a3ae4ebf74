"""Registry of live connections."""
from __future__ import annotations

import threading
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from chat_relay.infrastructure.ws.connection import Connection


class ConnectionRegistry:
    """Live connections keyed by connection handle.

    A user may hold several connections at once, so lookups by user id scan
    every entry. Readers always receive a copy taken under the lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._connections: dict[UUID, Connection] = {}

    def add(self, connection: Connection) -> None:
        with self._lock:
            self._connections[connection.id] = connection

    def remove(self, connection: Connection) -> bool:
        """Drop ``connection``. Returns False if it was already gone."""
        with self._lock:
            return self._connections.pop(connection.id, None) is not None

    def list_all(self) -> list[Connection]:
        with self._lock:
            return list(self._connections.values())

    def find_by_user_id(self, user_id: UUID) -> list[Connection]:
        with self._lock:
            return [c for c in self._connections.values() if c.user_id == user_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)
