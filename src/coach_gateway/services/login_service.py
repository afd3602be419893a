"""
coach_gateway.services.login_service

Login flow: provider assertion -> local user -> session credential.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from coach_gateway.auth.models import VerifiedIdentity
from coach_gateway.auth.session_tokens import SessionTokenService
from coach_gateway.db.models import User
from coach_gateway.errors import AppError
from coach_gateway.identity.google import IdentityClient
from coach_gateway.observability.logging import get_logger
from coach_gateway.services.user_directory import UserDirectory

log = get_logger(__name__)


class LoginService:
    def __init__(
        self,
        *,
        session: AsyncSession,
        identity: IdentityClient,
        tokens: SessionTokenService,
    ) -> None:
        self._identity = identity
        self._tokens = tokens
        self._directory = UserDirectory(session)

    async def login(self, *, code: str | None, id_token: str | None) -> tuple[str, User]:
        verified = await self._verify(code=code, id_token=id_token)
        user, created = await self._directory.find_or_create_with_status(verified)
        access_token = self._tokens.issue(user_id=str(user.id), email=user.email)
        log.info("login_succeeded", user_id=str(user.id), created=created)
        return access_token, user

    async def _verify(self, *, code: str | None, id_token: str | None) -> VerifiedIdentity:
        # When both are sent the code wins, matching the mobile client's primary path.
        if code:
            return await self._identity.exchange_code(code)
        if id_token:
            return await self._identity.verify_token(id_token)
        raise AppError.bad_request("Missing code or idToken")
