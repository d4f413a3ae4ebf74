from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class FileUpload:
    """File attached to an inbound chat frame: original name plus encoded content."""

    name: str
    data: str


@dataclass(frozen=True, slots=True)
class OutgoingMessage:
    recipient_id: UUID | None
    text: str | None = None
    file: FileUpload | None = None
