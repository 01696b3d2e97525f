"""
access_core.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings and DB sessions.
- Expose the startup-built collaborators (strategy registry, file authorizer).
- Encapsulate app.state access patterns.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from access_core.files.authorizer import FileAccessAuthorizer
from access_core.settings import Settings


def settings_dep(request: Request) -> Settings:
    # The app carries the settings it was built with (tests build apps with overrides).
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed explicitly by the service layer.
    async with session_factory() as session:
        yield session


def file_authorizer(request: Request) -> FileAccessAuthorizer:
    return request.app.state.file_authorizer  # type: ignore[attr-defined]


# --- Module Notes -----------------------------------------------------------
# Everything read from app.state here is created in `access_core.api.app` on startup.
