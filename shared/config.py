"""
Centralized configuration for the ChatGate backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., SUPABASE_*, RESEND_*).
"""

from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "ChatGate API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""
    supabase_jwt_secret: str = ""

    # Access gating
    access_allowlist: list[str] = []
    access_lookup_failure_policy: Literal["fail_open", "fail_closed"] = "fail_closed"
    landing_path: str = "/landing"

    # Subscriptions
    subscription_period_days: int = 30
    default_paid_plan: str = "premium"

    # Bulk provisioning throttle
    provisioning_rate_per_second: float = 1.0
    provisioning_burst: int = 1

    # Payment webhook (empty token disables signature verification)
    payment_webhook_token: str = ""

    # Email delivery (Resend)
    resend_api_key: str = ""
    email_from: str = "ChatGate <noreply@chatgate.app>"

    # Frontend URLs (for links in emails and redirects)
    frontend_url: str = "http://localhost:5173"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
