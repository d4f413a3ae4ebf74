from __future__ import annotations

import logging

from starlette.requests import cookie_parser

from chat_relay.application.dto.identity import Identity
from chat_relay.application.exceptions import UnauthorizedError
from chat_relay.application.ports.auth import TokenVerifier

logger = logging.getLogger(__name__)


def token_from_cookie_header(header: str | None, name: str = "token") -> str | None:
    """Pull the session token out of a raw ``Cookie`` header."""
    if not header:
        return None
    return cookie_parser(header).get(name) or None


async def resolve_identity(token: str | None, verifier: TokenVerifier) -> Identity | None:
    """Verify a handshake credential once.

    A missing or invalid token yields ``None``: the connection is still
    accepted, just never matched for presence or delivery.
    """
    if not token:
        return None
    try:
        return await verifier.verify(token)
    except UnauthorizedError:
        logger.debug("Handshake token rejected", exc_info=True)
        return None
