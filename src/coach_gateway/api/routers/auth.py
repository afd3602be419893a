"""
coach_gateway.api.routers.auth

Sign-in endpoint.

Responsibilities:
- Accept a provider auth code or ID token.
- Delegate verification, provisioning and credential issuing to `LoginService`.
- Return the session credential with the public user profile.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from coach_gateway.api.deps import db_session, identity_client_dep
from coach_gateway.auth.deps import session_tokens_dep
from coach_gateway.auth.session_tokens import SessionTokenService
from coach_gateway.errors import AppError
from coach_gateway.identity.google import IdentityClient
from coach_gateway.services.login_service import LoginService

router = APIRouter(prefix="/auth", tags=["auth"])

SUPPORTED_PROVIDERS = frozenset({"google"})


class AuthExchangeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str | None = Field(default=None, max_length=4096)
    id_token: str | None = Field(default=None, alias="idToken", max_length=8192)


class AuthUserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: uuid.UUID
    email: str
    name: str | None
    avatar_url: str | None = Field(alias="avatarUrl")


class AuthExchangeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(alias="accessToken")
    user: AuthUserResponse


@router.post("/{provider}", response_model=AuthExchangeResponse)
async def sign_in(
    provider: str,
    body: AuthExchangeRequest,
    session: AsyncSession = Depends(db_session),
    identity: IdentityClient = Depends(identity_client_dep),
    tokens: SessionTokenService = Depends(session_tokens_dep),
) -> AuthExchangeResponse:
    if provider not in SUPPORTED_PROVIDERS:
        raise AppError.not_found("Unsupported identity provider")

    svc = LoginService(session=session, identity=identity, tokens=tokens)
    access_token, user = await svc.login(code=body.code, id_token=body.id_token)
    return AuthExchangeResponse(
        access_token=access_token,
        user=AuthUserResponse(
            id=user.id,
            email=user.email,
            name=user.name,
            avatar_url=user.avatar_url,
        ),
    )
