from __future__ import annotations

from fastapi import APIRouter, Response, status

from chat_relay.api.deps import CurrentIdentity, HasherDep, UoWDep, VerifierDep
from chat_relay.api.v1.schemas.auth import CredentialsRequest, ProfileResponse
from chat_relay.api.v1.schemas.user import UserResponse
from chat_relay.application.dto.identity import Identity
from chat_relay.application.ports.auth import TokenSigner
from chat_relay.config import settings
from chat_relay.domain.entities.user import User
from chat_relay.services import user_service

router = APIRouter(tags=["auth"])


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        token,
        httponly=True,
        samesite="none",
        secure=True,
        max_age=settings.JWT_EXPIRES_DAYS * 24 * 3600,
    )


def _issue_session(response: Response, user: User, signer: TokenSigner) -> UserResponse:
    token = signer.sign(Identity(user_id=user.id, username=user.username))
    _set_session_cookie(response, token)
    return UserResponse.model_validate(user, from_attributes=True)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: CredentialsRequest,
    response: Response,
    uow: UoWDep,
    hasher: HasherDep,
    verifier: VerifierDep,
) -> UserResponse:
    user = await user_service.register(body.username, body.password, uow, hasher)
    return _issue_session(response, user, verifier)


@router.post("/login", response_model=UserResponse)
async def login(
    body: CredentialsRequest,
    response: Response,
    uow: UoWDep,
    hasher: HasherDep,
    verifier: VerifierDep,
) -> UserResponse:
    user = await user_service.login(body.username, body.password, uow, hasher)
    return _issue_session(response, user, verifier)


@router.post("/logout")
async def logout(response: Response) -> str:
    response.delete_cookie(
        settings.AUTH_COOKIE_NAME,
        httponly=True,
        samesite="none",
        secure=True,
    )
    return "ok"


@router.get("/profile", response_model=ProfileResponse)
async def profile(identity: CurrentIdentity) -> ProfileResponse:
    return ProfileResponse(user_id=identity.user_id, username=identity.username)
