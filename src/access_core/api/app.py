"""
access_core.api.app

FastAPI app factory for the access core service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Build the write-once collaborators (security gate, strategy registry, file
  authorizer, auth decision service) on startup and publish them on app.state.
- Translate `AccessError`s into JSON responses.
"""

from __future__ import annotations

import redis.asyncio as redis
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from access_core import __version__
from access_core.api.routers.auth import router as auth_router
from access_core.api.routers.health import router as health_router
from access_core.api.routers.scan_ticket import router as scan_ticket_router
from access_core.api.routers.uploads import router as uploads_router
from access_core.auth.ability import AuthDecisionService
from access_core.auth.credentials import CredentialResolver
from access_core.auth.jwt import JwtConfig
from access_core.db.init_db import init_db
from access_core.db.session import create_engine, create_sessionmaker
from access_core.errors import AccessError
from access_core.files.authorizer import FileAccessAuthorizer
from access_core.files.strategies import build_default_registry
from access_core.observability.logging import configure_logging, get_logger
from access_core.observability.middleware import RequestContextMiddleware
from access_core.security.gate import SecurityGate
from access_core.security.middleware import SecurityGateMiddleware
from access_core.security.rate_limit import (
    FixedWindowRateLimiter,
    MemoryWindowStore,
    RedisWindowStore,
    WindowStore,
)
from access_core.security.validation import RequestValidator
from access_core.settings import Settings

log = get_logger(__name__)


def jwt_config(settings: Settings) -> JwtConfig:
    return JwtConfig(alg=settings.jwt_alg, secret=settings.jwt_secret)


def rate_limit_store(app: FastAPI, settings: Settings) -> WindowStore:
    if settings.redis_url:
        client = redis.from_url(settings.redis_url, decode_responses=True)
        app.state.redis = client
        return RedisWindowStore(client)
    return MemoryWindowStore()


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    app = FastAPI(
        title="Content Platform Access Core",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings

    # Starlette runs the last-added middleware first: request context wraps the gate.
    app.add_middleware(SecurityGateMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(scan_ticket_router)
    app.include_router(uploads_router)

    @app.exception_handler(AccessError)
    async def _access_error(_: Request, exc: AccessError) -> JSONResponse:
        return JSONResponse(exc.to_body(), status_code=exc.status_code)

    @app.on_event("startup")
    async def _startup() -> None:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod uses Alembic migrations.
            await init_db(engine)

        # Registry is populated once here and only read afterwards.
        registry = build_default_registry(app.state.sessionmaker)
        app.state.strategy_registry = registry
        app.state.file_authorizer = FileAccessAuthorizer(
            registry, strict_missing_registry=settings.strict_missing_registry
        )
        app.state.auth_decisions = AuthDecisionService()
        app.state.security_gate = SecurityGate(
            rate_limiter=FixedWindowRateLimiter(
                store=rate_limit_store(app, settings),
                limit=settings.rate_limit_requests,
                window_seconds=settings.rate_limit_window_seconds,
                exempt_prefixes=settings.rate_limit_exempt_prefixes,
            ),
            validator=RequestValidator(),
            resolver=CredentialResolver(
                cfg=jwt_config(settings), session_factory=app.state.sessionmaker
            ),
            cookie_name=settings.cookie_name,
        )

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        engine = getattr(app.state, "engine", None)
        if engine is not None:
            await engine.dispose()
        client = getattr(app.state, "redis", None)
        if client is not None:
            await client.aclose()
        log.info("shutdown")

    return app


# --- Module Notes -----------------------------------------------------------
# App composition stays here; decisions live in security/, auth/, files/ and
# entitlements/.
