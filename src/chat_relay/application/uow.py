from __future__ import annotations

from typing import AsyncContextManager, Callable, Protocol

from chat_relay.application.repositories.message import MessageReader, MessageWriter
from chat_relay.application.repositories.user import UserReader, UserWriter


class UnitOfWork(Protocol):
    users: UserReader
    users_w: UserWriter
    messages: MessageReader
    messages_w: MessageWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...


UnitOfWorkFactory = Callable[[], AsyncContextManager[UnitOfWork]]
