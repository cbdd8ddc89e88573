"""
Supabase client factory.

Two kinds of client:
- the service-role client, cached, which bypasses RLS and backs the
  repositories and the admin identity operations
- anon clients, one per call, for sign-in and sign-up on behalf of a
  browser user
"""

from typing import Optional
from supabase import create_client, Client

from .config import get_settings

_service_client: Optional[Client] = None


def _client_for(key_setting: str) -> Client:
    """Create a client for the configured project using the named key setting."""
    settings = get_settings()
    key = getattr(settings, key_setting)
    if not settings.supabase_url or not key:
        raise RuntimeError(
            "Supabase configuration missing. "
            f"Set SUPABASE_URL and {key_setting.upper()} environment variables."
        )
    return create_client(settings.supabase_url, key)


def get_supabase_client() -> Client:
    """
    Service-role client shared by the whole process.

    Role and subscription rows are read for any principal and admin
    accounts are created through it, so it must never reach a browser.
    """
    global _service_client

    if _service_client is None:
        _service_client = _client_for("supabase_service_role_key")
    return _service_client


def get_supabase_anon_client() -> Client:
    """
    New anon-key client.

    Sign-in and sign-up store the resulting session on the client, so
    callers never share one.
    """
    return _client_for("supabase_anon_key")


def reset_client_cache() -> None:
    """Drop the cached service client (tests, configuration changes)."""
    global _service_client
    _service_client = None
