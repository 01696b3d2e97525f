"""
tests.test_credentials

Credential resolution against a real (in-memory) user store.
"""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from access_core.api.app import jwt_config
from access_core.auth.credentials import CredentialResolver, extract_bearer
from access_core.auth.jwt import JwtValidationError, decode_and_validate, issue_token
from conftest import seed_user, token_for


@pytest.fixture
def resolver(settings, session_factory) -> CredentialResolver:
    return CredentialResolver(cfg=jwt_config(settings), session_factory=session_factory)


@pytest.mark.asyncio
async def test_valid_token_yields_identity_with_ability(settings, session_factory, resolver) -> None:
    user_id = await seed_user(
        session_factory,
        "alice",
        role_type="editor",
        permissions=(("find", "api::lesson.lesson"),),
    )

    result = await resolver.resolve(f"Bearer {token_for(settings, user_id)}")

    assert result.clear_cookie is False
    assert result.identity is not None
    assert result.identity.user_id == user_id
    assert result.identity.role == "editor"
    assert result.identity.ability.can("find", "api::lesson.lesson")
    assert not result.identity.ability.can("delete", "api::lesson.lesson")


@pytest.mark.asyncio
async def test_forged_token_asks_for_cookie_clearing(settings, session_factory, resolver) -> None:
    user_id = await seed_user(session_factory, "bob")
    forged = jwt.encode({"id": user_id, "iat": 0, "exp": 4102444800}, "not-the-secret", algorithm="HS256")

    result = await resolver.resolve(f"Bearer {forged}")

    assert result.identity is None
    assert result.clear_cookie is True


@pytest.mark.asyncio
async def test_expired_token_asks_for_cookie_clearing(settings, session_factory, resolver) -> None:
    user_id = await seed_user(session_factory, "carol")
    expired = token_for(settings, user_id, ttl=timedelta(seconds=-5))

    result = await resolver.resolve(f"Bearer {expired}")

    assert result.identity is None
    assert result.clear_cookie is True


@pytest.mark.asyncio
async def test_blocked_and_unknown_principals_resolve_to_nobody(settings, session_factory, resolver) -> None:
    blocked_id = await seed_user(session_factory, "mallory", blocked=True)

    blocked = await resolver.resolve(f"Bearer {token_for(settings, blocked_id)}")
    unknown = await resolver.resolve(f"Bearer {token_for(settings, 9999)}")

    assert blocked.identity is None and blocked.clear_cookie is False
    assert unknown.identity is None and unknown.clear_cookie is False


@pytest.mark.asyncio
async def test_absent_or_malformed_header_is_anonymous(resolver) -> None:
    assert (await resolver.resolve(None)).identity is None
    assert (await resolver.resolve("Basic dXNlcjpwYXNz")).identity is None
    assert (await resolver.resolve("Bearer")).clear_cookie is False


def test_extract_bearer() -> None:
    assert extract_bearer("Bearer abc") == "abc"
    assert extract_bearer("bearer abc") == "abc"
    assert extract_bearer("Bearer a b") is None
    assert extract_bearer("") is None


def test_token_id_claim_must_be_an_integer(settings) -> None:
    cfg = jwt_config(settings)
    token = jwt.encode({"id": "7", "iat": 0, "exp": 4102444800}, cfg.secret, algorithm=cfg.alg)
    with pytest.raises(JwtValidationError):
        decode_and_validate(cfg=cfg, token=token)

    payload = decode_and_validate(cfg=cfg, token=issue_token(cfg=cfg, user_id=7))
    assert payload["id"] == 7
