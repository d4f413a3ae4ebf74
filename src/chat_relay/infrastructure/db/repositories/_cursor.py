"""Cursor-based pagination over the message timeline.

Cursor format: base64("<iso-timestamp>|<message uuid>"), padding stripped.
"""
from __future__ import annotations

import base64
import binascii
from datetime import datetime
from uuid import UUID

from chat_relay.application.exceptions import ValidationError


def encode_cursor(ts: datetime, message_id: UUID) -> str:
    raw = f"{ts.isoformat()}|{message_id}"
    cursor = base64.urlsafe_b64encode(raw.encode()).decode()
    return cursor.rstrip("=")


def decode_cursor(cursor: str) -> tuple[datetime, UUID]:
    cursor += "=" * ((4 - len(cursor) % 4) % 4)
    try:
        raw = base64.urlsafe_b64decode(cursor.encode()).decode()
        ts_str, uid_str = raw.split("|", 1)
        return datetime.fromisoformat(ts_str), UUID(uid_str)
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise ValidationError("Malformed cursor") from exc
