"""
access_core.db.repositories.lessons

Repository for `Lesson` entities.

Responsibilities:
- Fetch a lesson by document id with its week and course attached, for the
  lesson file-access strategy.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from access_core.db.models import Lesson


class LessonRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_document_id(self, document_id: str) -> Lesson | None:
        # week -> course are selectin-loaded, so the ownership chain is ready to walk.
        stmt = select(Lesson).where(Lesson.document_id == document_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()


# --- Module Notes -----------------------------------------------------------
# Lesson CRUD lives in the content service; this repository is read-only.
