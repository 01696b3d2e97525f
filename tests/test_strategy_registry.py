from __future__ import annotations

import pytest

from access_core.errors import ConfigurationError
from access_core.files.registry import AccessStrategyRegistry


@pytest.mark.asyncio
async def test_unregistered_content_type_is_denied() -> None:
    registry = AccessStrategyRegistry()
    assert await registry.can_access("api::unknown.unknown", "doc-1", 7) is False
    assert registry.has_strategy("api::unknown.unknown") is False


@pytest.mark.asyncio
async def test_registered_strategy_receives_exact_arguments() -> None:
    calls: list[tuple[str, int | None]] = []

    async def strategy(document_id: str, principal_id: int | None) -> bool:
        calls.append((document_id, principal_id))
        return principal_id == 7

    registry = AccessStrategyRegistry()
    registry.register("api::course.course", strategy)

    assert await registry.can_access("api::course.course", "doc-1", 7) is True
    assert await registry.can_access("api::course.course", "doc-2", 8) is False
    assert calls == [("doc-1", 7), ("doc-2", 8)]


@pytest.mark.asyncio
async def test_sync_strategies_are_supported() -> None:
    registry = AccessStrategyRegistry()
    registry.register("api::blog.blog", lambda document_id, principal_id: True)
    assert await registry.can_access("api::blog.blog", "doc-1", None) is True


def test_duplicate_registration_is_a_configuration_error() -> None:
    registry = AccessStrategyRegistry()

    async def strategy(document_id: str, principal_id: int | None) -> bool:
        return True

    registry.register("api::event.event", strategy)
    with pytest.raises(ConfigurationError):
        registry.register("api::event.event", strategy)
    assert registry.registered_types() == ["api::event.event"]


def test_non_callable_strategy_is_rejected() -> None:
    registry = AccessStrategyRegistry()
    with pytest.raises(ConfigurationError):
        registry.register("api::event.event", "allow")  # type: ignore[arg-type]
