"""Blob store backed by a local directory."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from chat_relay.application.exceptions import StorageError

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """Implements application.ports.blob.BlobStore on the filesystem.

    Names are flat: anything that would escape the root directory is rejected.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def ensure_root(self) -> None:
        self._root.mkdir(parents=True, exist_ok=True)

    def _path_for(self, name: str) -> Path | None:
        if not name or name != Path(name).name or name in (".", ".."):
            return None
        return self._root / name

    async def write(self, name: str, data: bytes) -> None:
        path = self._path_for(name)
        if path is None:
            raise StorageError(f"invalid blob name: {name!r}")
        try:
            await asyncio.to_thread(path.write_bytes, data)
        except OSError as exc:
            raise StorageError(f"failed to write blob {name}: {exc}") from exc
        logger.info("Blob saved: %s (%d bytes)", path, len(data))

    async def read(self, name: str) -> bytes | None:
        path = self._path_for(name)
        if path is None:
            return None
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"failed to read blob {name}: {exc}") from exc
