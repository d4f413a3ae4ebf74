"""Password hashing for stored user credentials."""
from __future__ import annotations

from passlib.context import CryptContext


class BcryptPasswordHasher:
    def __init__(self, rounds: int = 10) -> None:
        self._ctx = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        return self._ctx.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        if not hashed:
            return False
        try:
            return self._ctx.verify(password, hashed)
        except ValueError:
            return False
