"""
coach_gateway.auth.models

Auth domain models.

Responsibilities:
- Define the identity asserted by the external provider (`VerifiedIdentity`).
- Define the authenticated caller carried by a session credential (`Principal`).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class VerifiedIdentity:
    """
    Claims from a verified provider ID token. Not persisted.
    """

    provider_id: str
    email: str
    name: str | None = None
    avatar_url: str | None = None


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity, taken from the session credential alone.
    """

    user_id: str
    email: str
    issued_at: datetime
    expires_at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "email": self.email,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
        }
