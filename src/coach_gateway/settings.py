"""
coach_gateway.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (session signing secret, OAuth client secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Process-wide configuration, read once at startup.

    Secrets and provider credentials are copied into immutable config structs
    (`SessionTokenConfig`, `GoogleOAuthConfig`) when the app is built.
    """

    model_config = SettingsConfigDict(env_prefix="COACH_", case_sensitive=False)

    # Environment controls error disclosure and auto-init of DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "coach-gateway"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # Session credentials
    jwt_alg: str = "HS256"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    session_ttl_days: int = Field(default=7, ge=1)

    # Google OAuth / OpenID Connect
    google_client_id: str = ""
    google_client_secret: str = Field(default="", repr=False)
    # Mobile "server auth code" exchanges are done without a redirect URI.
    google_redirect_uri: str = ""
    google_token_url: str = "https://oauth2.googleapis.com/token"
    google_jwks_url: str = "https://www.googleapis.com/oauth2/v3/certs"
    google_jwks_cache_seconds: int = Field(default=3600, ge=0)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./coach.db"

    @property
    def is_dev(self) -> bool:
        return self.env == "dev"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Required in production: COACH_JWT_SECRET, COACH_GOOGLE_CLIENT_ID,
# COACH_GOOGLE_CLIENT_SECRET and COACH_DATABASE_URL.
