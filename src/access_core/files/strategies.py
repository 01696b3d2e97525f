"""
access_core.files.strategies

Built-in access strategies and the default registry wiring.

Responsibilities:
- `authenticated_access_strategy`: files attached to public-facing content.
- `make_lesson_access_strategy`: lesson files, visible to the lesson owner or the
  owner of the course the lesson belongs to.
- `build_default_registry`: the registry the app builds once at startup.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from access_core.db.repositories.lessons import LessonRepo
from access_core.files.registry import AccessStrategy, AccessStrategyRegistry

LESSON_CONTENT_TYPE = "api::lesson.lesson"

# Content whose attached media is rendered through plain <img>/<video> tags,
# which cannot carry a bearer token.
PUBLIC_CONTENT_TYPES: tuple[str, ...] = (
    "api::article.article",
    "api::blog.blog",
    "api::comment.comment",
    "api::course.course",
    "api::event.event",
    "plugin::users-permissions.user",
)


async def authenticated_access_strategy(document_id: str, principal_id: int | None) -> bool:
    # Being attached to a live piece of public content is the whole check.
    return True


def make_lesson_access_strategy(
    session_factory: async_sessionmaker[AsyncSession],
) -> AccessStrategy:
    async def lesson_access_strategy(document_id: str, principal_id: int | None) -> bool:
        if not document_id or principal_id is None:
            return False

        async with session_factory() as session:
            lesson = await LessonRepo(session).get_by_document_id(document_id)

        if lesson is None:
            return False
        if lesson.owner_id is not None and lesson.owner_id == principal_id:
            return True

        week = lesson.week
        if week is None or week.course is None:
            return False
        course_owner = week.course.owner_id
        return course_owner is not None and course_owner == principal_id

    return lesson_access_strategy


def build_default_registry(
    session_factory: async_sessionmaker[AsyncSession],
) -> AccessStrategyRegistry:
    registry = AccessStrategyRegistry()
    for content_type in PUBLIC_CONTENT_TYPES:
        registry.register(content_type, authenticated_access_strategy)
    registry.register(LESSON_CONTENT_TYPE, make_lesson_access_strategy(session_factory))
    return registry


# --- Module Notes -----------------------------------------------------------
# New content types register here; an unregistered type denies by default.
