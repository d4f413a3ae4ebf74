"""Per-connection heartbeat.

ALIVE --probe--> AWAITING_PONG --pong--> ALIVE
                              --timeout--> DEAD

A single timer handle is owned at any time: either the next probe or the
pending pong deadline.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable

from chat_relay.domain.value_objects.enums import LivenessState

logger = logging.getLogger(__name__)


class HeartbeatMonitor:
    def __init__(
        self,
        send_ping: Callable[[], object],
        on_dead: Callable[[], None],
        *,
        interval: float,
        timeout: float,
        name: str = "",
    ) -> None:
        if timeout >= interval:
            raise ValueError("heartbeat timeout must be shorter than the interval")
        self._send_ping = send_ping
        self._on_dead = on_dead
        self._interval = interval
        self._timeout = timeout
        self._name = name
        self._state = LivenessState.ALIVE
        self._timer: asyncio.TimerHandle | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._probe_sent_at: float | None = None
        self.last_pong_at: float | None = None

    @property
    def state(self) -> LivenessState:
        return self._state

    def start(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._schedule(self._interval, self._probe)

    def stop(self) -> None:
        """Cancel every pending timer. Safe to call repeatedly."""
        self._cancel()
        self._state = LivenessState.DEAD

    def pong_received(self) -> None:
        if self._loop is None:
            return
        now = self._loop.time()
        self.last_pong_at = now
        if self._state is not LivenessState.AWAITING_PONG:
            return
        self._cancel()
        self._state = LivenessState.ALIVE
        # keep a fixed cadence measured from when the probe went out
        elapsed = now - (self._probe_sent_at or now)
        self._schedule(max(self._interval - elapsed, 0.0), self._probe)

    def _probe(self) -> None:
        self._timer = None
        if self._state is LivenessState.DEAD:
            return
        assert self._loop is not None
        self._state = LivenessState.AWAITING_PONG
        self._probe_sent_at = self._loop.time()
        self._schedule(self._timeout, self._expire)
        self._send_ping()

    def _expire(self) -> None:
        self._timer = None
        if self._state is not LivenessState.AWAITING_PONG:
            return
        self._state = LivenessState.DEAD
        logger.info("Heartbeat timeout: %s", self._name)
        self._on_dead()

    def _schedule(self, delay: float, callback: Callable[[], None]) -> None:
        assert self._loop is not None
        self._cancel()
        self._timer = self._loop.call_later(delay, callback)

    def _cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
