from __future__ import annotations

from typing import Protocol

from chat_relay.application.dto.identity import Identity


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> Identity:
        """Raises UnauthorizedError for a bad, expired or malformed token."""
        ...


class TokenSigner(Protocol):
    def sign(self, identity: Identity) -> str: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...

    def verify(self, password: str, hashed: str) -> bool: ...
