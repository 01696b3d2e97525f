"""
access_core.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`): DB reachable and strategy registry built.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from access_core.api.deps import db_session

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(request: Request, session: AsyncSession = Depends(db_session)) -> dict[str, object]:
    await session.execute(text("SELECT 1"))
    registry = request.app.state.strategy_registry
    return {"status": "ready", "strategies": len(registry.registered_types())}


# --- Module Notes -----------------------------------------------------------
# Both probes are rate-limit exempt (`Settings.rate_limit_exempt_prefixes`).
