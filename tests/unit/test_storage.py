from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest

from chat_relay.application.exceptions import StorageError, ValidationError
from chat_relay.infrastructure.blob.local_store import LocalBlobStore
from chat_relay.infrastructure.db.repositories._cursor import decode_cursor, encode_cursor


@pytest.mark.asyncio
async def test_local_blob_store_write_and_read(tmp_path):
    store = LocalBlobStore(tmp_path / "uploads")
    store.ensure_root()

    await store.write("1714564800000-ab12cd34.png", b"\x89PNG")

    assert await store.read("1714564800000-ab12cd34.png") == b"\x89PNG"
    assert (tmp_path / "uploads" / "1714564800000-ab12cd34.png").exists()


@pytest.mark.asyncio
async def test_local_blob_store_missing(tmp_path):
    store = LocalBlobStore(tmp_path)

    assert await store.read("nope.png") is None


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["../escape.png", "a/b.png", "", ".."])
async def test_local_blob_store_rejects_paths(tmp_path, name):
    store = LocalBlobStore(tmp_path)

    with pytest.raises(StorageError):
        await store.write(name, b"x")
    assert await store.read(name) is None


@pytest.mark.asyncio
async def test_local_blob_store_write_failure(tmp_path):
    store = LocalBlobStore(tmp_path / "never-created")

    with pytest.raises(StorageError):
        await store.write("a.png", b"x")


def test_cursor_round_trip():
    ts = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    mid = uuid.uuid4()

    assert decode_cursor(encode_cursor(ts, mid)) == (ts, mid)


def test_malformed_cursor():
    with pytest.raises(ValidationError):
        decode_cursor("!!!")
