"""
coach_gateway.db.repositories.users

Persistence access for local users.

Responsibilities:
- Insert users, flushing so constraint violations surface at the call site.
- Look users up by provider identity.

Transactions are owned by the calling service.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coach_gateway.db.models import User


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        email: str,
        provider_id: str,
        name: str | None = None,
        avatar_url: str | None = None,
    ) -> User:
        # Flush so unique-constraint violations surface here as IntegrityError.
        user = User(
            email=email,
            provider_id=provider_id,
            name=name,
            avatar_url=avatar_url,
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def get_by_provider_id(self, provider_id: str) -> User | None:
        stmt = select(User).where(User.provider_id == provider_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()
