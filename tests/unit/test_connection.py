from __future__ import annotations

import pytest
from starlette.websockets import WebSocketState

from chat_relay.domain.value_objects.enums import LivenessState
from chat_relay.infrastructure.ws.connection import Connection
from chat_relay.infrastructure.ws.protocol import ChatMessageIn
from tests.conftest import FakeWebSocket, drain_loop


def test_unbound_connection_has_no_user():
    conn = Connection(FakeWebSocket())

    assert conn.user_id is None
    assert conn.username is None
    assert conn.liveness is LivenessState.ALIVE


def test_bound_connection_exposes_identity(alice):
    conn = Connection(FakeWebSocket(), alice)

    assert conn.user_id == alice.user_id
    assert conn.username == "alice"


def test_full_queue_drops_frame():
    conn = Connection(FakeWebSocket(), queue_size=1)

    assert conn.send("a") is True
    assert conn.send("b") is False


@pytest.mark.asyncio
async def test_close_is_idempotent_and_stops_sending(alice):
    ws = FakeWebSocket()
    conn = Connection(ws, alice)
    conn.start(
        on_dead=lambda c: None,
        on_broken=lambda c: None,
        heartbeat_interval=30.0,
        heartbeat_timeout=1.0,
    )

    conn.close(4000, "bye")
    conn.close(1000)
    await conn.wait_closed()
    await drain_loop()

    assert conn.closed
    assert conn.liveness is LivenessState.DEAD
    assert ws.close_code == 4000
    assert conn.send("late") is False


@pytest.mark.asyncio
async def test_close_skips_transport_already_gone(alice):
    ws = FakeWebSocket()
    ws.client_state = WebSocketState.DISCONNECTED
    conn = Connection(ws, alice)

    conn.close()
    await conn.wait_closed()

    assert ws.close_code is None


@pytest.mark.asyncio
async def test_writer_preserves_order(alice):
    ws = FakeWebSocket()
    conn = Connection(ws, alice)
    conn.start(
        on_dead=lambda c: None,
        on_broken=lambda c: None,
        heartbeat_interval=30.0,
        heartbeat_timeout=1.0,
    )
    for i in range(10):
        conn.send(str(i))
    await drain_loop()

    assert ws.sent == [str(i) for i in range(10)]
    conn.close()
    await conn.wait_closed()


@pytest.mark.asyncio
async def test_inbound_frames_dispatched_in_order(alice, bob):
    conn = Connection(FakeWebSocket(), alice)
    seen: list[str] = []

    async def handler(c, frame):
        await drain_loop(2)
        seen.append(frame.text)

    conn.start_inbound(handler)
    for text in ("1", "2", "3"):
        assert conn.submit(ChatMessageIn(recipient=bob.user_id, text=text))

    conn.close()
    await conn.wait_closed()

    assert seen == ["1", "2", "3"]
    assert conn.submit(ChatMessageIn(recipient=bob.user_id, text="late")) is False


@pytest.mark.asyncio
async def test_inbound_handler_error_does_not_stop_dispatch(alice, bob):
    conn = Connection(FakeWebSocket(), alice)
    seen: list[str] = []

    async def handler(c, frame):
        if frame.text == "boom":
            raise RuntimeError("store down")
        seen.append(frame.text)

    conn.start_inbound(handler)
    conn.submit(ChatMessageIn(recipient=bob.user_id, text="boom"))
    conn.submit(ChatMessageIn(recipient=bob.user_id, text="ok"))
    conn.close()
    await conn.wait_closed()

    assert seen == ["ok"]


def test_full_inbound_queue_drops_frame(alice, bob):
    conn = Connection(FakeWebSocket(), alice, queue_size=1)

    assert conn.submit(ChatMessageIn(recipient=bob.user_id, text="a")) is True
    assert conn.submit(ChatMessageIn(recipient=bob.user_id, text="b")) is False
