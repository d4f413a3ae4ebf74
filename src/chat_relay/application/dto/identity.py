from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Identity:
    """Authenticated caller identity carried by a signed token."""

    user_id: UUID
    username: str
