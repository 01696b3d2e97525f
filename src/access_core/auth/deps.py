"""
access_core.auth.deps

FastAPI dependency functions for authentication and authorization guards.

Responsibilities:
- Expose the `RequestContext` produced by the security gate.
- Enforce authentication, permissions (action + subject) and roles via reusable
  dependency factories declared per route.
"""

from __future__ import annotations

from fastapi import Depends, Request

from access_core.auth.ability import AuthDecisionService
from access_core.auth.models import Identity, RequestContext
from access_core.errors import ConfigurationError, Forbidden, Unauthenticated
from access_core.observability.logging import get_logger

log = get_logger(__name__)


def get_request_context(request: Request) -> RequestContext:
    # Populated by `security.middleware.SecurityGateMiddleware`; a route mounted
    # without the gate sees an anonymous context rather than an error.
    context = getattr(request.state, "access", None)
    if context is None:
        context = RequestContext()
        request.state.access = context
    return context


def get_identity(context: RequestContext = Depends(get_request_context)) -> Identity | None:
    return context.identity


def get_auth_decisions(request: Request) -> AuthDecisionService:
    # Created once on app startup in `access_core.api.app.create_app`.
    return request.app.state.auth_decisions  # type: ignore[attr-defined]


def require_authenticated(context: RequestContext = Depends(get_request_context)) -> Identity:
    identity = context.identity
    if identity is None:
        log.info("guard_denied", guard="authenticated", reason="no_identity")
        raise Unauthenticated("Authentication required")
    if identity.blocked:
        log.info("guard_denied", guard="authenticated", reason="blocked", user_id=identity.user_id)
        raise Forbidden("User is blocked")
    if not identity.confirmed:
        log.info("guard_denied", guard="authenticated", reason="unconfirmed", user_id=identity.user_id)
        raise Forbidden("Email not confirmed")
    return identity


def require_permission(action: str | None = None, subject: str | None = None):
    async def _dep(
        context: RequestContext = Depends(get_request_context),
        decisions: AuthDecisionService = Depends(get_auth_decisions),
    ) -> Identity:
        # Misconfigured route: fail before looking at the caller at all.
        if not action or not subject:
            log.error("guard_misconfigured", guard="permission", action=action, subject=subject)
            raise ConfigurationError("Missing permission configuration")

        identity = context.identity
        if identity is None:
            log.info("guard_denied", guard="permission", reason="no_identity")
            raise Unauthenticated("Authentication required")

        if not await decisions.check_permission(identity, action, subject):
            log.info(
                "guard_denied",
                guard="permission",
                user_id=identity.user_id,
                action=action,
                subject=subject,
            )
            raise Forbidden(f"Insufficient permissions: {action} on {subject}")
        return identity

    return _dep


def require_role(role_name: str | None = None):
    async def _dep(
        context: RequestContext = Depends(get_request_context),
        decisions: AuthDecisionService = Depends(get_auth_decisions),
    ) -> Identity:
        if not role_name:
            log.error("guard_misconfigured", guard="role")
            raise ConfigurationError("Missing role configuration")

        identity = context.identity
        if identity is None:
            log.info("guard_denied", guard="role", reason="no_identity")
            raise Unauthenticated("Authentication required")

        if not await decisions.has_role(identity, role_name):
            log.info("guard_denied", guard="role", user_id=identity.user_id, role=role_name)
            raise Forbidden(f"Role required: {role_name}")
        return identity

    return _dep


# --- Module Notes -----------------------------------------------------------
# Guards only read the context; the gate middleware must run first so that
# `request.state.access` reflects the resolved credential.
