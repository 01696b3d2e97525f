"""
access_core.errors

Failure taxonomy shared by the gate, guards, authorizer and gatekeeper.

Responsibilities:
- Give every authorization failure a stable machine-readable code.
- Carry the HTTP status the API boundary should answer with.
"""

from __future__ import annotations

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_429_TOO_MANY_REQUESTS,
    HTTP_500_INTERNAL_SERVER_ERROR,
)


class AccessError(Exception):
    code: str = "ACCESS_ERROR"
    status_code: int = HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_body(self) -> dict[str, dict[str, str]]:
        return {"error": {"code": self.code, "message": self.message}}


class RateLimited(AccessError):
    code = "RATE_LIMITED"
    status_code = HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, message: str, *, retry_after: int | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class InvalidInput(AccessError):
    code = "INVALID_INPUT"
    status_code = HTTP_400_BAD_REQUEST


class Unauthenticated(AccessError):
    code = "UNAUTHORIZED"
    status_code = HTTP_401_UNAUTHORIZED


class Forbidden(AccessError):
    # Blocked, unconfirmed, role and permission denials all land here.
    code = "FORBIDDEN"
    status_code = HTTP_403_FORBIDDEN


class NotFound(AccessError):
    code = "NOT_FOUND"
    status_code = HTTP_404_NOT_FOUND


class ExpiredOrWrongType(AccessError):
    code = "EXPIRED_OR_WRONG_TYPE"
    status_code = HTTP_400_BAD_REQUEST


class ConfigurationError(AccessError):
    code = "BAD_CONFIG"
    status_code = HTTP_400_BAD_REQUEST


class InternalError(AccessError):
    code = "INTERNAL_ERROR"
    status_code = HTTP_500_INTERNAL_SERVER_ERROR


# --- Module Notes -----------------------------------------------------------
# The gate middleware renders RateLimited/InvalidInput itself; everything raised
# from dependencies or handlers goes through the handler in `api.app`.
