"""
access_core.auth.jwt

JWT issuing and validation helpers.

Responsibilities:
- Issue signed credentials carrying the principal id (dev/login collaborators use this).
- Decode and validate credentials (signature, expiry, required claims).

Note:
- Tokens are HS256 with a shared secret, matching the platform's login service.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    secret: str


class JwtValidationError(Exception):
    pass


def issue_token(
    *,
    cfg: JwtConfig,
    user_id: int,
    ttl: timedelta = timedelta(days=30),
) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        "id": user_id,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_and_validate(*, cfg: JwtConfig, token: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            options={"require": ["exp", "iat", "id"]},
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e

    # bool is an int subclass; reject it explicitly.
    principal_id = payload.get("id")
    if not isinstance(principal_id, int) or isinstance(principal_id, bool):
        raise JwtValidationError("Token id claim must be an integer")
    return payload


# --- Module Notes -----------------------------------------------------------
# Token issuing is used by `api/routers/auth.py` (dev convenience) and tests;
# production credentials come from the login service with the same secret.
