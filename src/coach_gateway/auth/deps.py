"""
coach_gateway.auth.deps

FastAPI dependency functions for authentication.

Responsibilities:
- Convert a bearer session credential into a typed `Principal`.
- Reject missing, malformed, tampered or expired credentials with 401.
"""

from __future__ import annotations

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from coach_gateway.auth.models import Principal
from coach_gateway.auth.session_tokens import SessionTokenService
from coach_gateway.errors import AppError

# auto_error=False: failures go through AppError, not FastAPI's own 403 body.
_bearer = HTTPBearer(auto_error=False)


def session_tokens_dep(request: Request) -> SessionTokenService:
    # Built once on app startup in `coach_gateway.api.app.create_app`.
    return request.app.state.session_tokens  # type: ignore[attr-defined]


async def require_session(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    tokens: SessionTokenService = Depends(session_tokens_dep),
) -> Principal:
    # HTTPBearer yields None for a missing header, a non-Bearer scheme or an empty token.
    if creds is None or not creds.credentials:
        raise AppError.unauthorized("Missing or invalid authorization header")

    principal = tokens.verify(creds.credentials)
    if principal is None:
        raise AppError.unauthorized("Invalid or expired token")

    # Must stay async: sync dependencies run in a worker thread and lose contextvar updates.
    structlog.contextvars.bind_contextvars(user_id=principal.user_id)
    return principal


# --- Module Notes -----------------------------------------------------------
# The credential is the source of truth for user_id/email; the database is not
# consulted, so profile changes only show up after the next sign-in.
