"""
access_core.api.routers.uploads

Protected file endpoints.

Responsibilities:
- List the caller's own files.
- Authorize single-file reads through the `FileAccessAuthorizer`.
- Restrict deletion to the file owner.
- Guard direct `/uploads/*` URLs; authorized bytes are handed to the reverse
  proxy via `X-Accel-Redirect`.
"""

from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_204_NO_CONTENT

from access_core.api.deps import db_session, file_authorizer, settings_dep
from access_core.auth.deps import get_identity, require_authenticated
from access_core.auth.models import Identity
from access_core.db.models import UploadedFile
from access_core.db.repositories.files import FileRepo
from access_core.errors import Forbidden, NotFound, Unauthenticated
from access_core.files.authorizer import FileAccessAuthorizer
from access_core.observability.logging import get_logger
from access_core.settings import Settings

log = get_logger(__name__)

router = APIRouter(tags=["uploads"])


class RelatedOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    content_type: str | None
    document_id: str


class FileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    url: str
    mime: str
    owner_id: int | None
    related: list[RelatedOut] = Field(default_factory=list)


async def _authorized_file(
    file: UploadedFile | None,
    identity: Identity | None,
    authorizer: FileAccessAuthorizer,
) -> UploadedFile:
    if file is None:
        raise NotFound("File not found.")
    principal_id = identity.user_id if identity is not None else None
    if not await authorizer.can_access(file, principal_id):
        log.info("file_access_denied", file_id=file.id, user_id=principal_id)
        raise Forbidden("You do not have permission to access this file.")
    return file


@router.get("/api/upload/files", response_model=list[FileOut])
async def list_own_files(
    identity: Identity = Depends(require_authenticated),
    session: AsyncSession = Depends(db_session),
) -> list[UploadedFile]:
    # Listing is always scoped to the caller; there is no cross-owner search.
    return await FileRepo(session).list_for_owner(identity.user_id)


@router.get("/api/upload/files/{file_id}", response_model=FileOut)
async def get_file(
    file_id: int,
    identity: Identity | None = Depends(get_identity),
    session: AsyncSession = Depends(db_session),
    authorizer: FileAccessAuthorizer = Depends(file_authorizer),
) -> UploadedFile:
    file = await FileRepo(session).get(file_id)
    return await _authorized_file(file, identity, authorizer)


@router.delete("/api/upload/files/{file_id}", status_code=HTTP_204_NO_CONTENT)
async def delete_file(
    file_id: int,
    identity: Identity | None = Depends(get_identity),
    session: AsyncSession = Depends(db_session),
) -> Response:
    if identity is None:
        raise Unauthenticated("Authentication required to delete files.")

    repo = FileRepo(session)
    file = await repo.get(file_id)
    if file is None:
        raise NotFound("File not found.")
    # Ownerless legacy files cannot be deleted through the API either.
    if file.owner_id is None or file.owner_id != identity.user_id:
        raise Forbidden("Only the file owner can delete this file.")

    await repo.delete(file)
    await session.commit()
    log.info("file_deleted", file_id=file_id, user_id=identity.user_id)
    return Response(status_code=HTTP_204_NO_CONTENT)


@router.get("/uploads/{path:path}")
async def serve_upload(
    path: str,
    identity: Identity | None = Depends(get_identity),
    session: AsyncSession = Depends(db_session),
    authorizer: FileAccessAuthorizer = Depends(file_authorizer),
    settings: Settings = Depends(settings_dep),
) -> Response:
    url = f"/uploads/{path}"
    file = await _authorized_file(await FileRepo(session).get_by_url(url), identity, authorizer)
    return Response(
        status_code=200,
        media_type=file.mime,
        headers={
            "X-Accel-Redirect": f"{settings.protected_media_prefix}{file.url}",
            "Content-Disposition": f"inline; filename*=UTF-8''{quote(file.name, safe='')}",
        },
    )


# --- Module Notes -----------------------------------------------------------
# Upload itself (multipart, storage) is owned by the media service; these routes
# only decide who may read or delete what is already tracked.
