from __future__ import annotations

from fastapi import APIRouter

from chat_relay.api.deps import UoWDep
from chat_relay.api.v1.schemas.user import UserResponse
from chat_relay.services import user_service

router = APIRouter(tags=["people"])


@router.get("/people", response_model=list[UserResponse])
async def list_people(uow: UoWDep) -> list[UserResponse]:
    users = await user_service.list_people(uow)
    return [UserResponse.model_validate(u, from_attributes=True) for u in users]
