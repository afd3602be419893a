"""
coach_gateway.db.models

Persistence schema for the gateway.

Responsibilities:
- Define the `User` record provisioned on first sign-in.
- Enforce the uniqueness constraints (provider identity, email) that make
  concurrent first logins safe.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import String, Text, UniqueConstraint, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column

from coach_gateway.db.base import Base


def _utcnow() -> datetime:
    # Naive UTC timestamps; both columns are written once at creation.
    return datetime.utcnow()


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # Stable subject identifier from the identity provider (Google `sub`).
    provider_id: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint("provider_id", name="uq_users_provider_id"),
        UniqueConstraint("email", name="uq_users_email"),
    )


# --- Module Notes -----------------------------------------------------------
# The unique constraints are the only guard against duplicate users; see
# `services.user_directory` for how insert conflicts are resolved.
