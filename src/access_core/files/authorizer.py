"""
access_core.files.authorizer

File visibility decisions.

Responsibilities:
- Combine file ownership with per-content-type strategies from the registry.
- Keep the legacy rule that ownerless files are public.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from access_core.files.registry import AccessStrategyRegistry
from access_core.observability.logging import get_logger

log = get_logger(__name__)


class RelatedContent(Protocol):
    content_type: str | None
    document_id: str


class ProtectedFile(Protocol):
    owner_id: int | None
    related: Sequence[RelatedContent]


class FileAccessAuthorizer:
    """
    Decision order, first match wins:

    1. requester owns the file -> allow
    2. file has no owner (legacy upload) -> allow
    3. owned by someone else, attached to nothing -> deny
    4. no registry wired -> allow, unless `strict_missing_registry`
    5. any related item's strategy allows -> allow; otherwise deny
    """

    def __init__(
        self,
        registry: AccessStrategyRegistry | None,
        *,
        strict_missing_registry: bool = False,
    ) -> None:
        self._registry = registry
        self._strict_missing_registry = strict_missing_registry

    async def can_access(self, file: ProtectedFile | None, principal_id: int | None) -> bool:
        if file is None:
            return False

        owner_id = file.owner_id
        if owner_id is not None and principal_id is not None and owner_id == principal_id:
            return True

        # TODO: tighten once legacy uploads have been backfilled with owners.
        if owner_id is None:
            return True

        related = file.related or ()
        if not related:
            return False

        if self._registry is None:
            log.warning("file_access_registry_missing", strict=self._strict_missing_registry)
            return not self._strict_missing_registry

        for item in related:
            if not item.content_type:
                continue
            if await self._registry.can_access(item.content_type, item.document_id, principal_id):
                return True
        return False


# --- Module Notes -----------------------------------------------------------
# Strategies see only (document id, principal id); anything richer belongs in
# the strategy itself, not in this decision order.
