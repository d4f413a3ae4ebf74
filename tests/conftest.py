"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator
from uuid import UUID

import pytest
from starlette.websockets import WebSocketState

from chat_relay.application.dto.identity import Identity
from chat_relay.application.exceptions import StorageError
from chat_relay.domain.entities.message import Message
from chat_relay.domain.entities.user import User


@pytest.fixture
def alice() -> Identity:
    return Identity(user_id=uuid.uuid4(), username="alice")


@pytest.fixture
def bob() -> Identity:
    return Identity(user_id=uuid.uuid4(), username="bob")


@pytest.fixture
def carol() -> Identity:
    return Identity(user_id=uuid.uuid4(), username="carol")


def make_message(
    *,
    sender_id: UUID | None = None,
    recipient_id: UUID | None = None,
    text: str | None = "hi",
    file: str | None = None,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        sender_id=sender_id or uuid.uuid4(),
        recipient_id=recipient_id or uuid.uuid4(),
        text=text,
        file=file,
        created_at=datetime.now(timezone.utc),
    )


async def drain_loop(turns: int = 5) -> None:
    """Let writer tasks and scheduled callbacks run."""
    for _ in range(turns):
        await asyncio.sleep(0)


class FakeWebSocket:
    """Stands in for a Starlette WebSocket on the server side."""

    def __init__(self, *, fail_sends: bool = False) -> None:
        self.sent: list[str] = []
        self.close_code: int | None = None
        self.close_reason: str | None = None
        self.fail_sends = fail_sends
        self.application_state = WebSocketState.CONNECTED
        self.client_state = WebSocketState.CONNECTED

    async def send_text(self, data: str) -> None:
        if self.fail_sends:
            raise RuntimeError("connection reset")
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        self.close_code = code
        self.close_reason = reason
        self.application_state = WebSocketState.DISCONNECTED


@dataclass
class FakeBlobStore:
    blobs: dict[str, bytes] = field(default_factory=dict)
    fail_writes: bool = False

    async def write(self, name: str, data: bytes) -> None:
        if self.fail_writes:
            raise StorageError(f"disk full writing {name}")
        self.blobs[name] = data

    async def read(self, name: str) -> bytes | None:
        return self.blobs.get(name)


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now


class FakeHasher:
    """Reversible stand-in for bcrypt."""

    def hash(self, password: str) -> str:
        return "hashed:" + password

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == "hashed:" + password


@dataclass
class FakeUserReader:
    _users: list[User] = field(default_factory=list)

    async def get_by_id(self, user_id: UUID) -> User | None:
        return next((u for u in self._users if u.id == user_id), None)

    async def get_by_username(self, username: str) -> User | None:
        return next((u for u in self._users if u.username == username), None)

    async def list_all(self) -> list[User]:
        return sorted(self._users, key=lambda u: u.username)


@dataclass
class FakeUserWriter:
    _reader: FakeUserReader

    async def create(self, username: str, password_hash: str) -> User:
        user = User(
            id=uuid.uuid4(),
            username=username,
            password_hash=password_hash,
            created_at=datetime.now(timezone.utc),
        )
        self._reader._users.append(user)
        return user


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)

    async def list_between(
        self,
        user_a: UUID,
        user_b: UUID,
        *,
        cursor: str | None = None,
        limit: int = 100,
    ) -> list[Message]:
        pair = {user_a, user_b}
        matching = [m for m in self._messages if {m.sender_id, m.recipient_id} == pair]
        return sorted(matching, key=lambda m: m.created_at)[:limit]


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader
    fail: bool = False
    _base: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    async def create(
        self,
        sender_id: UUID,
        recipient_id: UUID,
        text: str | None,
        file: str | None,
    ) -> Message:
        if self.fail:
            raise ConnectionError("database unavailable")
        msg = Message(
            id=uuid.uuid4(),
            sender_id=sender_id,
            recipient_id=recipient_id,
            text=text,
            file=file,
            created_at=self._base + timedelta(milliseconds=len(self._reader._messages)),
        )
        self._reader._messages.append(msg)
        return msg


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    users: FakeUserReader = field(default_factory=FakeUserReader)
    users_w: FakeUserWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    _committed: bool = False

    def __post_init__(self) -> None:
        if self.users_w is None:
            self.users_w = FakeUserWriter(self.users)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True

    async def rollback(self) -> None:
        pass


def uow_factory_for(uow: FakeUoW):
    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUoW]:
        yield uow

    return _factory
