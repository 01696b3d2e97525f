"""
access_core.auth.credentials

Credential resolution: bearer token -> `Identity`.

Responsibilities:
- Bridge the `jwt` cookie into an `Authorization: Bearer` header value so every
  downstream check sees a single credential path.
- Verify the token, load the principal, and derive its `Ability`.
- Degrade every failure to "no identity"; never raise to the caller.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from access_core.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from access_core.auth.models import Ability, Identity
from access_core.db.models import User
from access_core.db.repositories.users import UserRepo
from access_core.observability.logging import get_logger

log = get_logger(__name__)


def bridge_cookie_to_header(
    headers: Mapping[str, str],
    cookies: Mapping[str, str],
    *,
    cookie_name: str = "jwt",
) -> str | None:
    """
    Return the Authorization header value the rest of the pipeline should see.

    An explicit header always wins; otherwise the cookie is promoted to a bearer header.
    """

    header = headers.get("authorization")
    if header:
        return header
    token = cookies.get(cookie_name)
    if token:
        return f"Bearer {token}"
    return None


def extract_bearer(authorization: str | None) -> str | None:
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        return None
    return parts[1]


def identity_from_user(user: User) -> Identity:
    role = user.role
    grants = frozenset((p.action, p.subject) for p in role.permissions) if role else frozenset()
    return Identity(
        user_id=user.id,
        username=user.username,
        blocked=user.blocked,
        confirmed=user.confirmed,
        role=role.type if role else None,
        ability=Ability(grants=grants),
    )


@dataclass(frozen=True, slots=True)
class CredentialResolution:
    identity: Identity | None = None
    # Set when a presented token failed verification.
    clear_cookie: bool = False


class CredentialResolver:
    def __init__(
        self,
        *,
        cfg: JwtConfig,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        self._cfg = cfg
        self._session_factory = session_factory

    async def resolve(self, authorization: str | None) -> CredentialResolution:
        token = extract_bearer(authorization)
        if token is None:
            return CredentialResolution()

        try:
            payload = decode_and_validate(cfg=self._cfg, token=token)
        except JwtValidationError as e:
            log.info("credential_rejected", reason=str(e))
            return CredentialResolution(clear_cookie=True)

        user_id: int = payload["id"]
        try:
            async with self._session_factory() as session:
                user = await UserRepo(session).get(user_id)
                identity = identity_from_user(user) if user is not None else None
        except SQLAlchemyError:
            log.exception("credential_lookup_failed", user_id=user_id)
            return CredentialResolution()

        if identity is None:
            log.info("credential_unknown_principal", user_id=user_id)
            return CredentialResolution()
        if identity.blocked:
            log.info("credential_blocked_principal", user_id=user_id)
            return CredentialResolution()

        return CredentialResolution(identity=identity)
