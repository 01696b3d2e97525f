"""
access_core.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the gate, guards, authorizer and gatekeeper.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Enterprise pattern:
    - Strict env-driven configuration
    - Defaults safe for local dev
    - Single settings object injected across layers
    """

    model_config = SettingsConfigDict(env_prefix="ACCESS_", case_sensitive=False)

    # Environment controls cookie hardening and auto-init of DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "access-core"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Credentials
    jwt_alg: str = "HS256"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    jwt_ttl_minutes: int = 30 * 24 * 60
    cookie_name: str = "jwt"
    cookie_domain: str | None = None

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./access.db"

    # Security gate
    # Shared rate-limit counters; unset keeps them in process memory.
    redis_url: str | None = None
    rate_limit_requests: int = 200
    rate_limit_window_seconds: int = 60
    rate_limit_exempt_prefixes: tuple[str, ...] = (
        "/admin",
        "/content-manager",
        "/healthz",
        "/readyz",
    )

    # File access: deny instead of allow when no strategy registry is wired.
    strict_missing_registry: bool = False
    # Internal location the reverse proxy serves authorized media bytes from.
    protected_media_prefix: str = "/protected"

    # Entitlements: "none" leaves tickets untouched on a successful scan.
    ticket_consume_policy: Literal["none", "mark_consumed"] = "none"

    @property
    def is_production(self) -> bool:
        return self.env == "prod"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Every layer reads its toggles from here; keep field names stable since they
# double as the ACCESS_* environment contract.
