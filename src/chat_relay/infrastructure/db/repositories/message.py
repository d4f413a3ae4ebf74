from __future__ import annotations

from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_relay.domain.entities.message import Message
from chat_relay.infrastructure.db.mappers import message as mapper
from chat_relay.infrastructure.db.models.message import MessageModel
from chat_relay.infrastructure.db.repositories._cursor import decode_cursor


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_between(
        self,
        user_a: UUID,
        user_b: UUID,
        *,
        cursor: str | None = None,
        limit: int = 100,
    ) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(
                or_(
                    and_(MessageModel.sender_id == user_a, MessageModel.recipient_id == user_b),
                    and_(MessageModel.sender_id == user_b, MessageModel.recipient_id == user_a),
                )
            )
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
            .limit(limit)
        )
        if cursor:
            ts, mid = decode_cursor(cursor)
            stmt = stmt.where(
                (MessageModel.created_at > ts)
                | ((MessageModel.created_at == ts) & (MessageModel.id > mid))
            )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        sender_id: UUID,
        recipient_id: UUID,
        text: str | None,
        file: str | None,
    ) -> Message:
        model = MessageModel(
            sender_id=sender_id,
            recipient_id=recipient_id,
            text=text,
            file=file,
        )
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)
