"""
coach_gateway.api.routers.me

Current-session endpoint.

Responsibilities:
- Require a valid session credential.
- Echo the credential claims back to the caller.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from coach_gateway.auth.deps import require_session
from coach_gateway.auth.models import Principal

router = APIRouter(tags=["me"])


@router.get("/me")
async def me(principal: Principal = Depends(require_session)) -> dict[str, Any]:
    # Straight from the session credential; no database round trip.
    return {"user": principal.to_payload()}
