"""
access_core.auth.ability

Auth decision service consulted by the permission and role guards.

Responsibilities:
- Answer "may this identity perform `action` on `subject`?" from its `Ability`.
- Answer role-membership questions.
"""

from __future__ import annotations

from access_core.auth.models import Identity


class AuthDecisionService:
    """
    Decisions are read from the identity resolved by the gate, so they stay
    consistent for the lifetime of a request. Async so a remote policy engine
    can be dropped in behind the same interface.
    """

    async def check_permission(self, identity: Identity | None, action: str, subject: str) -> bool:
        if identity is None:
            return False
        return identity.ability.can(action, subject)

    async def has_role(self, identity: Identity | None, role_name: str) -> bool:
        if identity is None or identity.role is None:
            return False
        return identity.role == role_name
