"""
access_core.db.repositories.users

Repository for `User` entities.

Responsibilities:
- Load a principal together with its role and role permissions, which the
  credential resolver turns into an `Identity` + `Ability`.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from access_core.db.models import User


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: int) -> User | None:
        # Role and its permissions are eager-loaded (selectin) on the mapping.
        return await self._session.get(User, user_id)
