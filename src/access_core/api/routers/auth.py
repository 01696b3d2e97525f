from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_404_NOT_FOUND

from access_core.api.deps import db_session, settings_dep
from access_core.auth.cookies import clear_credential_cookie, set_credential_cookie
from access_core.auth.deps import get_identity
from access_core.auth.jwt import JwtConfig, issue_token
from access_core.auth.models import Identity
from access_core.db.repositories.users import UserRepo
from access_core.errors import NotFound, Unauthenticated
from access_core.settings import Settings

router = APIRouter(tags=["auth"])


class DevTokenRequest(BaseModel):
    user_id: int = Field(ge=1)
    ttl_minutes: int = Field(default=60, ge=1, le=30 * 24 * 60)


class DevTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MeResponse(BaseModel):
    id: int
    username: str
    role: str | None
    confirmed: bool
    blocked: bool


@router.post("/api/v1/dev/token", response_model=DevTokenResponse)
async def mint_dev_token(
    body: DevTokenRequest,
    response: Response,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> DevTokenResponse:
    if settings.is_production:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")

    if await UserRepo(session).get(body.user_id) is None:
        raise NotFound("User not found")

    token = issue_token(
        cfg=JwtConfig(alg=settings.jwt_alg, secret=settings.jwt_secret),
        user_id=body.user_id,
        ttl=timedelta(minutes=body.ttl_minutes),
    )
    set_credential_cookie(response, token, settings)
    return DevTokenResponse(access_token=token)


@router.post("/api/auth/logout")
async def logout(response: Response, settings: Settings = Depends(settings_dep)) -> dict[str, str]:
    clear_credential_cookie(response, settings)
    return {"message": "Logged out successfully"}


@router.get("/api/auth/me", response_model=MeResponse)
async def me(identity: Identity | None = Depends(get_identity)) -> MeResponse:
    if identity is None:
        raise Unauthenticated("No authorization header was found")
    return MeResponse(
        id=identity.user_id,
        username=identity.username,
        role=identity.role,
        confirmed=identity.confirmed,
        blocked=identity.blocked,
    )
