"""Tests for environment-driven settings."""

import pytest

from routedoc import Settings


class TestSettings:
    """Test reading settings from the environment."""

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.environment == "development"
        assert settings.host == "127.0.0.1"
        assert settings.port == 5000
        assert settings.log_level == "INFO"
        assert settings.service_name == "todos-service"
        assert not settings.is_production

    def test_overrides(self):
        settings = Settings.from_env({
            "ROUTEDOC_ENV": " Production ",
            "HOST": "0.0.0.0",
            "PORT": "8080",
            "ROUTEDOC_LOG_LEVEL": "debug",
            "ROUTEDOC_SERVICE_NAME": "todos-api",
        })
        assert settings.is_production
        assert settings.host == "0.0.0.0"
        assert settings.port == 8080
        assert settings.log_level == "DEBUG"
        assert settings.service_name == "todos-api"

    def test_invalid_port(self):
        with pytest.raises(ValueError, match="PORT must be an integer"):
            Settings.from_env({"PORT": "http"})

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("PORT", "5050")
        monkeypatch.setenv("ROUTEDOC_ENV", "production")
        settings = Settings.from_env()
        assert settings.port == 5050
        assert settings.is_production

    def test_frozen(self):
        with pytest.raises(Exception):
            Settings().port = 1
