"""
tests.test_guards

Route guards exercised through HTTP, on routes mounted just for these tests.
"""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio
from fastapi import Depends, FastAPI

from access_core.auth.deps import require_authenticated, require_permission, require_role
from access_core.auth.models import Identity
from conftest import bearer, seed_user


@pytest_asyncio.fixture
async def guarded(app: FastAPI, client: httpx.AsyncClient) -> httpx.AsyncClient:
    @app.get("/guarded/authenticated")
    async def _authenticated(identity: Identity = Depends(require_authenticated)) -> dict:
        return {"id": identity.user_id}

    @app.get("/guarded/permission")
    async def _permission(
        identity: Identity = Depends(require_permission("create", "api::event.event")),
    ) -> dict:
        return {"id": identity.user_id}

    @app.get("/guarded/permission-misconfigured")
    async def _permission_misconfigured(
        identity: Identity = Depends(require_permission("create")),
    ) -> dict:
        return {"id": identity.user_id}

    @app.get("/guarded/role")
    async def _role(identity: Identity = Depends(require_role("organizer"))) -> dict:
        return {"id": identity.user_id}

    @app.get("/guarded/role-misconfigured")
    async def _role_misconfigured(identity: Identity = Depends(require_role())) -> dict:
        return {"id": identity.user_id}

    return client


@pytest.mark.asyncio
async def test_misconfigured_permission_guard_fails_before_identity(guarded: httpx.AsyncClient) -> None:
    r = await guarded.get("/guarded/permission-misconfigured")
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "BAD_CONFIG"

    r = await guarded.get("/guarded/role-misconfigured")
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "BAD_CONFIG"


@pytest.mark.asyncio
async def test_guards_require_identity(guarded: httpx.AsyncClient) -> None:
    for path in ("/guarded/authenticated", "/guarded/permission", "/guarded/role"):
        r = await guarded.get(path)
        assert r.status_code == 401, path
        assert r.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_permission_guard(guarded: httpx.AsyncClient, settings, session_factory) -> None:
    plain = await seed_user(session_factory, "plain")
    creator = await seed_user(
        session_factory,
        "creator",
        role_type="organizer",
        permissions=(("create", "api::event.event"),),
    )

    denied = await guarded.get("/guarded/permission", headers=bearer(settings, plain))
    assert denied.status_code == 403
    assert "create" in denied.json()["error"]["message"]

    ok = await guarded.get("/guarded/permission", headers=bearer(settings, creator))
    assert ok.status_code == 200
    assert ok.json() == {"id": creator}


@pytest.mark.asyncio
async def test_role_guard(guarded: httpx.AsyncClient, settings, session_factory) -> None:
    plain = await seed_user(session_factory, "plain")
    organizer = await seed_user(session_factory, "org", role_type="organizer")
    roleless = await seed_user(session_factory, "roleless", role_type=None)

    assert (await guarded.get("/guarded/role", headers=bearer(settings, plain))).status_code == 403
    assert (await guarded.get("/guarded/role", headers=bearer(settings, roleless))).status_code == 403
    assert (await guarded.get("/guarded/role", headers=bearer(settings, organizer))).status_code == 200


@pytest.mark.asyncio
async def test_unconfirmed_user_is_forbidden(guarded: httpx.AsyncClient, settings, session_factory) -> None:
    pending = await seed_user(session_factory, "pending", confirmed=False)

    r = await guarded.get("/guarded/authenticated", headers=bearer(settings, pending))

    assert r.status_code == 403
    assert r.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_cookie_credential_passes_guards(guarded: httpx.AsyncClient, settings, session_factory) -> None:
    user_id = await seed_user(session_factory, "cookie_user")
    token = bearer(settings, user_id)["Authorization"].removeprefix("Bearer ")

    r = await guarded.get(
        "/guarded/authenticated", headers={"Cookie": f"{settings.cookie_name}={token}"}
    )

    assert r.status_code == 200
    assert r.json() == {"id": user_id}
