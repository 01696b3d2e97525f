"""
tests.conftest

Shared fixtures: an app booted against in-memory SQLite, an HTTP client bound
to it, and helpers for seeding principals and minting credentials.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import timedelta

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from access_core.api.app import create_app, jwt_config
from access_core.auth.jwt import issue_token
from access_core.db.models import Role, RolePermission, User
from access_core.settings import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(env="test", database_url="sqlite+aiosqlite:///:memory:")


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not manage lifespan automatically; do it explicitly.
    await app.router.startup()
    try:
        yield app
    finally:
        await app.router.shutdown()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def session_factory(app: FastAPI) -> async_sessionmaker[AsyncSession]:
    return app.state.sessionmaker


async def seed_user(
    session_factory: async_sessionmaker[AsyncSession],
    username: str,
    *,
    blocked: bool = False,
    confirmed: bool = True,
    role_type: str | None = "authenticated",
    permissions: tuple[tuple[str, str], ...] = (),
) -> int:
    async with session_factory() as session:
        role = None
        if role_type is not None:
            role = (
                await session.execute(select(Role).where(Role.type == role_type))
            ).scalar_one_or_none()
            if role is None:
                role = Role(name=role_type.title(), type=role_type)
                session.add(role)
            for action, subject in permissions:
                role.permissions.append(RolePermission(action=action, subject=subject))
        user = User(
            username=username,
            email=f"{username}@example.com",
            blocked=blocked,
            confirmed=confirmed,
            role=role,
        )
        session.add(user)
        await session.commit()
        return user.id


def token_for(settings: Settings, user_id: int, *, ttl: timedelta = timedelta(hours=1)) -> str:
    return issue_token(cfg=jwt_config(settings), user_id=user_id, ttl=ttl)


def bearer(settings: Settings, user_id: int) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_for(settings, user_id)}"}
