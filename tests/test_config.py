"""Tests for configuration management."""

import pytest

from shiptrack.utils.config import Config, get_config, reset_config, set_config


class TestConfig:
    def test_testing_defaults_to_memory_database(self, monkeypatch):
        monkeypatch.delenv("SHIPTRACK_DATABASE_URL", raising=False)
        assert Config("testing").database_url == "sqlite:///:memory:"

    def test_unknown_environment(self):
        with pytest.raises(ValueError, match="Unknown environment"):
            Config("staging")

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("SHIPTRACK_TRACKING_PREFIX", "EMS")
        monkeypatch.setenv("SHIPTRACK_SESSION_TTL_MINUTES", "15")
        monkeypatch.setenv("RESEND_API_KEY", "re_123")

        config = Config("testing")

        assert config.tracking_prefix == "EMS"
        assert config.session_ttl_minutes == 15
        assert config.email_enabled is True

    def test_override_beats_environment(self, monkeypatch):
        monkeypatch.setenv("SHIPTRACK_COMPANY_NAME", "From Env")
        assert Config("testing", company_name="Explicit").company_name == "Explicit"

    def test_defaults(self, monkeypatch):
        for var in (
            "SHIPTRACK_TRACKING_PREFIX",
            "RESEND_API_KEY",
            "SHIPTRACK_ADMIN_USERNAME",
            "SHIPTRACK_ADMIN_PASSWORD",
        ):
            monkeypatch.delenv(var, raising=False)
        config = Config("testing")
        assert config.tracking_prefix == "ESP"
        assert config.admin_username == "admin"
        assert config.admin_password == ""
        assert config.email_enabled is False

    def test_frontend_url_trailing_slash_stripped(self):
        config = Config("testing", frontend_url="https://track.example.com/")
        assert config.frontend_url == "https://track.example.com"


class TestConfigSingleton:
    def test_set_and_reset(self):
        config = Config("testing", company_name="Singleton Co")
        set_config(config)
        assert get_config() is config

        reset_config()
        assert get_config("testing") is not config

    def test_environment_from_env_var(self, monkeypatch):
        reset_config()
        monkeypatch.setenv("SHIPTRACK_ENV", "testing")
        assert get_config().is_testing
