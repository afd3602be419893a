"""
coach_gateway.services.user_directory

Find-or-create of local users keyed by provider identity.

Responsibilities:
- Return the existing user for a provider identity, unchanged.
- Create the user on first sign-in.
- Resolve concurrent first logins through the `provider_id` unique constraint:
  a losing insert re-reads the winner's row instead of failing.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coach_gateway.auth.models import VerifiedIdentity
from coach_gateway.db.models import User
from coach_gateway.db.repositories.users import UserRepo
from coach_gateway.errors import AppError
from coach_gateway.observability.logging import get_logger

log = get_logger(__name__)


class UserDirectory:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._users = UserRepo(session)

    async def find_or_create(self, identity: VerifiedIdentity) -> User:
        user, _ = await self.find_or_create_with_status(identity)
        return user

    async def find_or_create_with_status(self, identity: VerifiedIdentity) -> tuple[User, bool]:
        """
        Returns `(user, created)`. Stored profile fields are never updated here.
        """

        existing = await self._users.get_by_provider_id(identity.provider_id)
        if existing is not None:
            return existing, False

        try:
            user = await self._users.create(
                email=identity.email,
                provider_id=identity.provider_id,
                name=identity.name,
                avatar_url=identity.avatar_url,
            )
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            winner = await self._users.get_by_provider_id(identity.provider_id)
            if winner is None:
                # Not a provider_id race: the email belongs to another provider identity.
                log.warning("user_email_conflict", provider_id=identity.provider_id)
                raise AppError.conflict("Email already registered to another account") from e
            log.info("user_create_conflict", provider_id=identity.provider_id, user_id=str(winner.id))
            return winner, False

        log.info("user_created", provider_id=identity.provider_id, user_id=str(user.id))
        return user, True


# --- Module Notes -----------------------------------------------------------
# No locks are taken here; the storage constraint is the only coordination point.
