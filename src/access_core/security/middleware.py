"""
access_core.security.middleware

HTTP middleware that runs the security gate before any route handler.

Responsibilities:
- Translate a Starlette request into a `GateRequest` and run the gate.
- Answer gate rejections directly (429 / 400).
- Publish the resulting `RequestContext` on `request.state.access`.
- Expire the credential cookie when the presented token failed verification.
"""

from __future__ import annotations

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from access_core.auth.cookies import clear_credential_cookie
from access_core.errors import InvalidInput, RateLimited
from access_core.observability.logging import get_logger
from access_core.security.gate import GateRequest, RejectionCode, SecurityGate
from access_core.settings import Settings

log = get_logger(__name__)


class SecurityGateMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        # Gate and settings are created on app startup in `access_core.api.app.create_app`.
        gate: SecurityGate = request.app.state.security_gate
        settings: Settings = request.app.state.settings

        decision = await gate.run(
            GateRequest(
                method=request.method,
                path=request.url.path,
                client_id=request.client.host if request.client else "unknown",
                headers=request.headers,
                cookies=request.cookies,
                body=await request.body(),
            )
        )

        rejection = decision.rejection
        if rejection is not None:
            log.warning("gate_rejected", code=rejection.code.value, reason=rejection.message)
            if rejection.code is RejectionCode.rate_limited:
                err: RateLimited | InvalidInput = RateLimited(
                    rejection.message, retry_after=rejection.retry_after
                )
                headers = {"Retry-After": str(rejection.retry_after)} if rejection.retry_after else None
            else:
                err = InvalidInput(rejection.message)
                headers = None
            rejected = JSONResponse(err.to_body(), status_code=err.status_code, headers=headers)
            if decision.context.clear_cookie:
                clear_credential_cookie(rejected, settings)
            return rejected

        context = decision.context
        request.state.access = context
        if context.identity is not None:
            structlog.contextvars.bind_contextvars(user_id=context.identity.user_id)

        response: Response = await call_next(request)
        if context.clear_cookie:
            clear_credential_cookie(response, settings)
        return response


# --- Module Notes -----------------------------------------------------------
# Registered inside `RequestContextMiddleware` so gate log lines carry the request id.
