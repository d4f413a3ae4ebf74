from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from chat_relay.application.dto.identity import Identity
from chat_relay.application.exceptions import UnauthorizedError


class HS256Verifier:
    """Sign and verify session tokens with a shared HS256 secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        *,
        expires_in: timedelta = timedelta(days=7),
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._expires_in = expires_in

    def sign(self, identity: Identity) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "userId": str(identity.user_id),
            "username": identity.username,
            "iat": now,
            "exp": now + self._expires_in,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    async def verify(self, token: str) -> Identity:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp"]},
            )
            return Identity(
                user_id=UUID(payload["userId"]),
                username=str(payload["username"]),
            )
        except (jwt.InvalidTokenError, KeyError, ValueError) as exc:
            raise UnauthorizedError("Invalid or expired token") from exc
