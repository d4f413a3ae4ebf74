from __future__ import annotations

import pytest

from chat_relay.application.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from chat_relay.infrastructure.auth.passwords import BcryptPasswordHasher
from chat_relay.services import user_service
from tests.conftest import FakeHasher, FakeUoW


@pytest.fixture
def uow() -> FakeUoW:
    return FakeUoW()


@pytest.fixture
def hasher() -> FakeHasher:
    return FakeHasher()


@pytest.mark.asyncio
async def test_register_creates_user(uow, hasher):
    user = await user_service.register("  alice ", "secret", uow, hasher)

    assert user.username == "alice"
    assert user.password_hash == "hashed:secret"
    assert uow._committed is True


@pytest.mark.asyncio
@pytest.mark.parametrize("username,password", [("", "x"), ("   ", "x"), ("alice", "")])
async def test_register_requires_credentials(uow, hasher, username, password):
    with pytest.raises(ValidationError):
        await user_service.register(username, password, uow, hasher)


@pytest.mark.asyncio
async def test_register_duplicate_username(uow, hasher):
    await user_service.register("alice", "secret", uow, hasher)

    with pytest.raises(ConflictError):
        await user_service.register("alice", "other", uow, hasher)


@pytest.mark.asyncio
async def test_login_success(uow, hasher):
    created = await user_service.register("alice", "secret", uow, hasher)

    user = await user_service.login("alice", "secret", uow, hasher)

    assert user.id == created.id


@pytest.mark.asyncio
async def test_login_unknown_user(uow, hasher):
    with pytest.raises(NotFoundError):
        await user_service.login("ghost", "secret", uow, hasher)


@pytest.mark.asyncio
async def test_login_wrong_password(uow, hasher):
    await user_service.register("alice", "secret", uow, hasher)

    with pytest.raises(UnauthorizedError):
        await user_service.login("alice", "nope", uow, hasher)


@pytest.mark.asyncio
async def test_list_people_sorted(uow, hasher):
    for name in ("carol", "alice", "bob"):
        await user_service.register(name, "pw", uow, hasher)

    people = await user_service.list_people(uow)

    assert [u.username for u in people] == ["alice", "bob", "carol"]


def test_bcrypt_hasher_round_trip():
    hasher = BcryptPasswordHasher(rounds=4)
    hashed = hasher.hash("secret")

    assert hashed != "secret"
    assert hasher.verify("secret", hashed) is True
    assert hasher.verify("wrong", hashed) is False
    assert hasher.verify("secret", "") is False
