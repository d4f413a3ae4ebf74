from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from chat_relay.api.deps import CurrentIdentity, UoWDep
from chat_relay.api.v1.schemas.common import PaginatedResponse
from chat_relay.api.v1.schemas.message import MessageResponse
from chat_relay.infrastructure.db.repositories._cursor import encode_cursor
from chat_relay.services import message_service

router = APIRouter(tags=["messages"])


@router.get("/messages/{user_id}", response_model=PaginatedResponse[MessageResponse])
async def list_messages(
    user_id: UUID,
    identity: CurrentIdentity,
    uow: UoWDep,
    cursor: str | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
) -> PaginatedResponse[MessageResponse]:
    """Conversation between the caller and ``user_id``, oldest first."""
    messages = await message_service.list_conversation(
        identity, user_id, cursor, limit, uow,
    )
    next_cursor = None
    if len(messages) == limit:
        last = messages[-1]
        next_cursor = encode_cursor(last.created_at, last.id)
    return PaginatedResponse[MessageResponse](
        items=[MessageResponse.from_entity(m) for m in messages],
        next_cursor=next_cursor,
    )
