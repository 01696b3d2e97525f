"""
access_core.auth.cookies

Credential cookie contract: name from settings, HttpOnly, SameSite=Strict,
Secure in production, path "/".
"""

from __future__ import annotations

from starlette.responses import Response

from access_core.settings import Settings


def set_credential_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        settings.cookie_name,
        token,
        max_age=settings.jwt_ttl_minutes * 60,
        path="/",
        domain=settings.cookie_domain,
        secure=settings.is_production,
        httponly=True,
        samesite="strict",
    )


def clear_credential_cookie(response: Response, settings: Settings) -> None:
    response.set_cookie(
        settings.cookie_name,
        "",
        max_age=0,
        path="/",
        domain=settings.cookie_domain,
        secure=settings.is_production,
        httponly=True,
        samesite="strict",
    )


# --- Module Notes -----------------------------------------------------------
# Clearing must mirror the attributes used when setting, or browsers keep the
# original cookie.
