"""Tests for the Supabase client factory."""

import os
from unittest.mock import MagicMock, patch

import pytest

from shared.config import get_settings
from shared.database import (
    get_supabase_anon_client,
    get_supabase_client,
    reset_client_cache,
)


@pytest.fixture(autouse=True)
def clean_cache():
    reset_client_cache()
    yield
    reset_client_cache()


@pytest.fixture
def supabase_env(monkeypatch):
    """Settings pointing at a fake project."""
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
    get_settings.cache_clear()


@pytest.fixture
def create_client():
    with patch("shared.database.create_client") as mock_create:
        mock_create.side_effect = lambda url, key: MagicMock(name=f"client:{key}")
        yield mock_create


class TestServiceClient:
    def test_uses_service_role_key(self, supabase_env, create_client):
        get_supabase_client()
        create_client.assert_called_once_with("https://project.supabase.co", "service-role-key")

    def test_is_cached_until_reset(self, supabase_env, create_client):
        first = get_supabase_client()
        assert get_supabase_client() is first

        reset_client_cache()

        assert get_supabase_client() is not first
        assert create_client.call_count == 2

    @pytest.mark.parametrize("url,key", [
        ("", ""),
        ("", "service-role-key"),
        ("https://project.supabase.co", ""),
    ])
    def test_missing_configuration(self, monkeypatch, create_client, url, key):
        monkeypatch.setenv("SUPABASE_URL", url)
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", key)
        get_settings.cache_clear()

        with pytest.raises(RuntimeError, match="SUPABASE_SERVICE_ROLE_KEY"):
            get_supabase_client()
        create_client.assert_not_called()


class TestAnonClient:
    def test_uses_anon_key(self, supabase_env, create_client):
        get_supabase_anon_client()
        create_client.assert_called_once_with("https://project.supabase.co", "anon-key")

    def test_fresh_client_per_call(self, supabase_env, create_client):
        """Sign-in sessions are never shared between callers."""
        assert get_supabase_anon_client() is not get_supabase_anon_client()

    def test_not_the_service_client(self, supabase_env, create_client):
        assert get_supabase_anon_client() is not get_supabase_client()

    def test_missing_anon_key(self, monkeypatch, create_client):
        monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "")
        get_settings.cache_clear()

        with pytest.raises(RuntimeError, match="SUPABASE_ANON_KEY"):
            get_supabase_anon_client()


@pytest.mark.skipif(
    not os.environ.get("SUPABASE_URL") or not os.environ.get("SUPABASE_SERVICE_ROLE_KEY"),
    reason="SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY environment variables not set"
)
class TestSupabaseIntegration:
    """
    Runs against a real project:
        SUPABASE_URL=https://xxx.supabase.co SUPABASE_SERVICE_ROLE_KEY=xxx \
            pytest tests/shared/test_database.py -k Integration
    """

    @pytest.mark.parametrize("table,columns", [
        ("user_roles", "user_id, role"),
        ("subscriptions", "id, user_id, status, expires_at"),
    ])
    def test_access_tables_are_readable(self, table, columns):
        response = get_supabase_client().table(table).select(columns).limit(1).execute()
        assert isinstance(response.data, list)
