"""
coach_gateway.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Service banner (`/`) and simple health check (`/health`).
- Liveness probe (`/healthz`) and readiness probe (`/readyz`) with DB connectivity validation.
"""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from coach_gateway.api.deps import db_session

router = APIRouter()


@router.get("/")
async def root() -> dict[str, str]:
    return {"message": "AI Coach Backend"}


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "timestamp": datetime.now(tz=UTC).isoformat()}


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(session: AsyncSession = Depends(db_session)) -> dict[str, str]:
    await session.execute(text("SELECT 1"))
    return {"status": "ready"}
