from __future__ import annotations

from typing import Protocol


class BlobStore(Protocol):
    async def write(self, name: str, data: bytes) -> None:
        """Persist ``data`` under ``name``. Raises StorageError on I/O failure."""
        ...

    async def read(self, name: str) -> bytes | None: ...
