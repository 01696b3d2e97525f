"""
access_core.db.repositories.files

Repository for `UploadedFile` entities.

Responsibilities:
- Fetch files with owner + related-content references populated.
- List and delete files on behalf of their owner.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from access_core.db.models import FileRelation, UploadedFile


class FileRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, file_id: int) -> UploadedFile | None:
        return await self._session.get(UploadedFile, file_id)

    async def get_by_url(self, url: str) -> UploadedFile | None:
        stmt = select(UploadedFile).where(UploadedFile.url == url)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_for_owner(self, owner_id: int, *, limit: int = 100) -> list[UploadedFile]:
        stmt = (
            select(UploadedFile)
            .where(UploadedFile.owner_id == owner_id)
            .order_by(UploadedFile.id)
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def add(
        self,
        *,
        name: str,
        url: str,
        owner_id: int | None,
        related: list[tuple[str | None, str]] | None = None,
    ) -> UploadedFile:
        f = UploadedFile(name=name, url=url, owner_id=owner_id)
        f.related = [
            FileRelation(content_type=content_type, document_id=document_id)
            for content_type, document_id in (related or [])
        ]
        self._session.add(f)
        await self._session.flush()
        return f

    async def delete(self, file: UploadedFile) -> None:
        await self._session.delete(file)
        await self._session.flush()
