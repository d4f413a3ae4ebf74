from __future__ import annotations

import mimetypes

from fastapi import APIRouter, Response

from chat_relay.api.deps import BlobStoreDep
from chat_relay.application.exceptions import NotFoundError

router = APIRouter(tags=["uploads"])


@router.get("/uploads/{name}")
async def get_upload(name: str, blobs: BlobStoreDep) -> Response:
    content = await blobs.read(name)
    if content is None:
        raise NotFoundError("File not found")
    media_type = mimetypes.guess_type(name)[0] or "application/octet-stream"
    return Response(content=content, media_type=media_type)
