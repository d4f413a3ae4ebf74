"""FastAPI dependency injection helpers."""
from __future__ import annotations

from datetime import timedelta
from typing import Annotated, AsyncIterator

from fastapi import Depends
from fastapi.requests import HTTPConnection
from fastapi.security import APIKeyCookie

from chat_relay.application.dto.identity import Identity
from chat_relay.application.exceptions import UnauthorizedError
from chat_relay.application.ports.blob import BlobStore
from chat_relay.application.uow import UnitOfWorkFactory
from chat_relay.config import settings
from chat_relay.infrastructure.auth.hs256_verifier import HS256Verifier
from chat_relay.infrastructure.auth.passwords import BcryptPasswordHasher
from chat_relay.infrastructure.db.session import AsyncSessionLocal
from chat_relay.infrastructure.db.uow import SqlAlchemyUoW, open_uow
from chat_relay.infrastructure.ws.manager import ConnectionManager

_cookie_scheme = APIKeyCookie(name=settings.AUTH_COOKIE_NAME, auto_error=False)


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        try:
            yield uow
        finally:
            await session.close()


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


def get_uow_factory() -> UnitOfWorkFactory:
    return open_uow


UoWFactoryDep = Annotated[UnitOfWorkFactory, Depends(get_uow_factory)]


_verifier: HS256Verifier | None = None


def get_verifier() -> HS256Verifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = HS256Verifier(
            settings.JWT_SECRET,
            settings.JWT_ALGORITHM,
            expires_in=timedelta(days=settings.JWT_EXPIRES_DAYS),
        )
    return _verifier


VerifierDep = Annotated[HS256Verifier, Depends(get_verifier)]


_hasher: BcryptPasswordHasher | None = None


def get_password_hasher() -> BcryptPasswordHasher:
    global _hasher  # noqa: PLW0603
    if _hasher is None:
        _hasher = BcryptPasswordHasher(settings.BCRYPT_ROUNDS)
    return _hasher


HasherDep = Annotated[BcryptPasswordHasher, Depends(get_password_hasher)]


def get_blob_store(conn: HTTPConnection) -> BlobStore:
    return conn.app.state.blob_store


BlobStoreDep = Annotated[BlobStore, Depends(get_blob_store)]


def get_manager(conn: HTTPConnection) -> ConnectionManager:
    return conn.app.state.relay


ManagerDep = Annotated[ConnectionManager, Depends(get_manager)]


async def get_current_identity(
    token: Annotated[str | None, Depends(_cookie_scheme)],
    verifier: VerifierDep,
) -> Identity:
    if not token:
        raise UnauthorizedError("Unauthorized")
    return await verifier.verify(token)


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
