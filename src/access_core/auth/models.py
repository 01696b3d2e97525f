"""
access_core.auth.models

Auth domain models.

Responsibilities:
- Define the resolved caller identity (`Identity`) and its capability set (`Ability`).
- Define the explicit per-request context the gate hands to guards and handlers.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Ability:
    """
    Capability set derived from the caller's role permissions.
    """

    grants: frozenset[tuple[str, str]] = frozenset()

    def can(self, action: str, subject: str) -> bool:
        return (action, subject) in self.grants


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Authenticated caller identity, resolved once per request from a verified credential.
    """

    user_id: int
    username: str
    blocked: bool
    confirmed: bool
    role: str | None
    ability: Ability = field(default_factory=Ability)


@dataclass(slots=True)
class RequestContext:
    """
    Output of the security gate, stored on `request.state.access`.

    `identity` is None when no credential was presented or it did not verify;
    `clear_cookie` asks the gate middleware to expire the credential cookie on
    the way out; `payload` is the sanitized JSON body, when there was one.
    """

    identity: Identity | None = None
    authorization: str | None = None
    clear_cookie: bool = False
    payload: object | None = None

    @property
    def principal_id(self) -> int | None:
        return self.identity.user_id if self.identity is not None else None


# --- Module Notes -----------------------------------------------------------
# Identity is never persisted by this service; it lives for one request.
