"""
access_core.security.gate

Per-request security gate.

Responsibilities:
- Bridge the credential cookie into a bearer header before any check runs.
- Run rate limiting, input validation and credential resolution in one pass.
- Reduce their results to a single `SecurityDecision` (rate limit beats validation;
  authentication never rejects here).
"""

from __future__ import annotations

import asyncio
import enum
from collections.abc import Mapping
from dataclasses import dataclass, field

from access_core.auth.credentials import CredentialResolver, bridge_cookie_to_header
from access_core.auth.models import RequestContext
from access_core.security.rate_limit import FixedWindowRateLimiter
from access_core.security.validation import RequestValidator


class RejectionCode(enum.StrEnum):
    rate_limited = "RATE_LIMITED"
    invalid_input = "INVALID_INPUT"


@dataclass(frozen=True, slots=True)
class GateRejection:
    code: RejectionCode
    message: str
    retry_after: int | None = None


@dataclass(frozen=True, slots=True)
class GateRequest:
    method: str
    path: str
    client_id: str
    headers: Mapping[str, str] = field(default_factory=dict)
    cookies: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""


@dataclass(frozen=True, slots=True)
class SecurityDecision:
    context: RequestContext
    rejection: GateRejection | None = None

    @property
    def allowed(self) -> bool:
        return self.rejection is None


class SecurityGate:
    def __init__(
        self,
        *,
        rate_limiter: FixedWindowRateLimiter,
        validator: RequestValidator,
        resolver: CredentialResolver,
        cookie_name: str = "jwt",
    ) -> None:
        self._rate_limiter = rate_limiter
        self._validator = validator
        self._resolver = resolver
        self._cookie_name = cookie_name

    async def run(self, request: GateRequest) -> SecurityDecision:
        authorization = bridge_cookie_to_header(
            request.headers, request.cookies, cookie_name=self._cookie_name
        )

        # Independent checks: all three run to completion, then the results are joined.
        rate, validation, credential = await asyncio.gather(
            self._rate_limiter.check(request.client_id, path=request.path),
            self._validator.validate(
                method=request.method,
                path=request.path,
                content_type=request.headers.get("content-type"),
                body=request.body,
            ),
            self._resolver.resolve(authorization),
        )

        context = RequestContext(
            identity=credential.identity,
            authorization=authorization,
            clear_cookie=credential.clear_cookie,
            payload=validation.payload,
        )

        if not rate.allowed:
            return SecurityDecision(
                context=context,
                rejection=GateRejection(
                    code=RejectionCode.rate_limited,
                    message="Rate limit exceeded. Please try again later.",
                    retry_after=rate.retry_after,
                ),
            )
        if not validation.ok:
            return SecurityDecision(
                context=context,
                rejection=GateRejection(code=RejectionCode.invalid_input, message=validation.message),
            )
        return SecurityDecision(context=context)


# --- Module Notes -----------------------------------------------------------
# Identity-dependent decisions (guards) run after this returns, never inside it.
