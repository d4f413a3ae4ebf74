from __future__ import annotations

from chat_relay.application.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from chat_relay.application.ports.auth import PasswordHasher
from chat_relay.application.uow import UnitOfWork
from chat_relay.domain.entities.user import User


async def register(
    username: str,
    password: str,
    uow: UnitOfWork,
    hasher: PasswordHasher,
) -> User:
    username = username.strip()
    if not username or not password:
        raise ValidationError("Username and password required")

    if await uow.users.get_by_username(username) is not None:
        raise ConflictError("Username already taken")

    user = await uow.users_w.create(username, hasher.hash(password))
    await uow.commit()
    return user


async def login(
    username: str,
    password: str,
    uow: UnitOfWork,
    hasher: PasswordHasher,
) -> User:
    if not username or not password:
        raise ValidationError("Username and password required")

    user = await uow.users.get_by_username(username.strip())
    if user is None:
        raise NotFoundError("User not found")
    if not hasher.verify(password, user.password_hash):
        raise UnauthorizedError("Invalid credentials")
    return user


async def list_people(uow: UnitOfWork) -> list[User]:
    return await uow.users.list_all()
