"""Tests for shared/config.py."""

import pytest
from unittest.mock import patch
import os

from pydantic import ValidationError

from shared.config import Settings, get_settings


class TestSettings:
    def test_default_values(self):
        """Settings should have sensible defaults."""
        settings = Settings()
        assert settings.app_name == "ChatGate API"
        assert settings.debug is False
        assert settings.port == 8000
        assert settings.host == "0.0.0.0"
        assert settings.app_version == "0.1.0"
        assert settings.frontend_url == "http://localhost:5173"

    def test_access_defaults(self):
        """Lookup failures deny access unless configured otherwise."""
        settings = Settings()
        assert settings.access_lookup_failure_policy == "fail_closed"
        assert settings.access_allowlist == []
        assert settings.landing_path == "/landing"
        assert settings.subscription_period_days == 30
        assert settings.default_paid_plan == "premium"

    def test_provisioning_defaults(self):
        """Provisioning throttle defaults to one account per second."""
        settings = Settings()
        assert settings.provisioning_rate_per_second == 1.0
        assert settings.provisioning_burst == 1

    def test_loads_from_env(self):
        """Settings should load from environment variables."""
        with patch.dict(os.environ, {"DEBUG": "true", "PORT": "9000"}):
            settings = Settings()
            assert settings.debug is True
            assert settings.port == 9000

    def test_loads_allowlist_from_env(self):
        """The allowlist is a JSON list in the environment."""
        with patch.dict(os.environ, {"ACCESS_ALLOWLIST": '["owner@example.com"]'}):
            settings = Settings()
            assert settings.access_allowlist == ["owner@example.com"]

    def test_loads_failure_policy_from_env(self):
        with patch.dict(os.environ, {"ACCESS_LOOKUP_FAILURE_POLICY": "fail_open"}):
            settings = Settings()
            assert settings.access_lookup_failure_policy == "fail_open"

    def test_rejects_unknown_failure_policy(self):
        with patch.dict(os.environ, {"ACCESS_LOOKUP_FAILURE_POLICY": "sometimes"}):
            with pytest.raises(ValidationError):
                Settings()

    def test_loads_supabase_config_from_env(self):
        """Settings should load Supabase configuration from environment variables."""
        with patch.dict(os.environ, {
            "SUPABASE_URL": "https://test.supabase.co",
            "SUPABASE_ANON_KEY": "test-anon-key",
            "SUPABASE_SERVICE_ROLE_KEY": "test-service-key",
        }):
            settings = Settings()
            assert settings.supabase_url == "https://test.supabase.co"
            assert settings.supabase_anon_key == "test-anon-key"
            assert settings.supabase_service_role_key == "test-service-key"


class TestGetSettings:
    def test_get_settings_returns_settings_instance(self):
        """get_settings should return a Settings instance."""
        # Clear the cache first
        get_settings.cache_clear()
        settings = get_settings()
        assert isinstance(settings, Settings)

    def test_get_settings_caches(self):
        """get_settings should return cached instance."""
        # Clear the cache first
        get_settings.cache_clear()
        settings1 = get_settings()
        settings2 = get_settings()
        assert settings1 is settings2
