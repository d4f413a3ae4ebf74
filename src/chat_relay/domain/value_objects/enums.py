from __future__ import annotations

from enum import StrEnum


class LivenessState(StrEnum):
    ALIVE = "alive"
    AWAITING_PONG = "awaiting_pong"
    DEAD = "dead"


class InboundFrameType(StrEnum):
    MESSAGE = "message"
    PONG = "pong"
    CLOSE = "close"
