"""
access_core.files.registry

Access strategy registry: content type -> access decision function.

Responsibilities:
- Register one strategy per content-type identifier at startup.
- Resolve lookups at request time; unknown content types are denied.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable

from access_core.errors import ConfigurationError
from access_core.observability.logging import get_logger

log = get_logger(__name__)

# (document_id, principal_id) -> allowed. principal_id is None for anonymous callers.
AccessStrategy = Callable[[str, int | None], Awaitable[bool] | bool]


class AccessStrategyRegistry:
    def __init__(self) -> None:
        self._strategies: dict[str, AccessStrategy] = {}

    def register(self, content_type: str, strategy: AccessStrategy) -> None:
        if not content_type:
            raise ConfigurationError("Strategy content type must be a non-empty string")
        if not callable(strategy):
            raise ConfigurationError(f"Strategy for {content_type} must be callable")
        if content_type in self._strategies:
            raise ConfigurationError(f"Strategy already registered for {content_type}")
        self._strategies[content_type] = strategy
        log.info("access_strategy_registered", content_type=content_type)

    async def can_access(self, content_type: str, document_id: str, principal_id: int | None) -> bool:
        strategy = self._strategies.get(content_type)
        if strategy is None:
            log.debug("access_strategy_missing", content_type=content_type)
            return False

        result = strategy(document_id, principal_id)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)

    def has_strategy(self, content_type: str) -> bool:
        return content_type in self._strategies

    def registered_types(self) -> list[str]:
        return list(self._strategies)


# --- Module Notes -----------------------------------------------------------
# Built once in `access_core.api.app` on startup; lookups after that are read-only.
