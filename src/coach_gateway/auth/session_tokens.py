"""
coach_gateway.auth.session_tokens

Session credential issuing and verification.

Responsibilities:
- Issue HS256-signed JWTs carrying `userId`, `email`, `iat` and `exp`.
- Verify signature and expiry, returning `None` for any invalid credential.

Note:
- Credentials are stateless; expiry is the only way a credential stops working.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from coach_gateway.auth.models import Principal
from coach_gateway.settings import Settings


@dataclass(frozen=True, slots=True)
class SessionTokenConfig:
    secret: str
    alg: str = "HS256"
    ttl: timedelta = timedelta(days=7)

    @classmethod
    def from_settings(cls, settings: Settings) -> SessionTokenConfig:
        return cls(
            secret=settings.jwt_secret,
            alg=settings.jwt_alg,
            ttl=timedelta(days=settings.session_ttl_days),
        )


class SessionTokenService:
    def __init__(self, cfg: SessionTokenConfig) -> None:
        self._cfg = cfg

    def issue(self, *, user_id: str, email: str, now: datetime | None = None) -> str:
        iat = int((now or datetime.now(tz=UTC)).timestamp())
        payload: dict[str, Any] = {
            "userId": user_id,
            "email": email,
            "iat": iat,
            "exp": iat + int(self._cfg.ttl.total_seconds()),
        }
        return jwt.encode(payload, self._cfg.secret, algorithm=self._cfg.alg)

    def verify(self, token: str) -> Principal | None:
        try:
            # Pinning `algorithms` rejects `none` and algorithm-confusion tokens.
            payload = jwt.decode(
                token,
                self._cfg.secret,
                algorithms=[self._cfg.alg],
                options={"require": ["exp", "iat"]},
            )
        except InvalidTokenError:
            return None

        user_id = payload.get("userId")
        email = payload.get("email")
        if not isinstance(user_id, str) or not user_id:
            return None
        if not isinstance(email, str) or not email:
            return None

        return Principal(
            user_id=user_id,
            email=email,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
        )


# --- Module Notes -----------------------------------------------------------
# `verify` is pure computation (no I/O) and runs inline in the auth guard.
