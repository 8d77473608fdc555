"""Tests for client configuration."""

import pytest
from pydantic import ValidationError

from canvas_client.exceptions import (
    ConfigurationError,
    MissingApiKeyError,
    MissingBaseUrlError,
)
from canvas_client.settings import CanvasSettings, mask_secret


class TestCanvasSettings:
    """Tests for the CanvasSettings class."""

    def test_defaults(self):
        """Test default values."""
        settings = CanvasSettings(_env_file=None)
        assert settings.base_url is None
        assert settings.api_key is None
        assert settings.api_version == "v1"
        assert settings.account_id == 1
        assert settings.per_page == 100
        assert settings.max_retries == 3
        assert settings.rate_limit_enabled is True
        assert settings.cache_enabled is False
        assert settings.cache_ttl == 300.0

    def test_trailing_slash_is_stripped(self):
        settings = CanvasSettings(base_url="https://canvas.test/", _env_file=None)
        assert settings.base_url == "https://canvas.test"
        assert settings.api_root == "https://canvas.test/api/v1/"

    def test_invalid_base_url(self):
        """Test that a URL without scheme is rejected."""
        with pytest.raises(ValidationError):
            CanvasSettings(base_url="canvas.test", _env_file=None)

    def test_environment_variables(self, monkeypatch):
        """Test loading from CANVAS_* variables."""
        monkeypatch.setenv("CANVAS_BASE_URL", "https://env.canvas.test")
        monkeypatch.setenv("CANVAS_API_KEY", "env-key")
        monkeypatch.setenv("CANVAS_PER_PAGE", "25")

        settings = CanvasSettings.from_env()
        assert settings.base_url == "https://env.canvas.test"
        assert settings.api_key == "env-key"
        assert settings.per_page == 25

    def test_overrides_win_over_environment(self, monkeypatch):
        monkeypatch.setenv("CANVAS_API_KEY", "env-key")
        settings = CanvasSettings.from_env(api_key="explicit")
        assert settings.api_key == "explicit"

    def test_none_overrides_are_ignored(self, monkeypatch):
        """Test that None does not shadow the environment."""
        monkeypatch.setenv("CANVAS_API_KEY", "env-key")
        settings = CanvasSettings.from_env(api_key=None)
        assert settings.api_key == "env-key"

    def test_instances_are_independent(self):
        """Test that two clients can hold different configurations."""
        first = CanvasSettings(base_url="https://a.test", _env_file=None)
        second = CanvasSettings(base_url="https://b.test", _env_file=None)
        assert first.base_url != second.base_url

    def test_api_key_hidden_from_repr(self):
        settings = CanvasSettings(api_key="super-secret-token", _env_file=None)
        assert "super-secret-token" not in repr(settings)

    def test_debug_config_masks_key(self):
        settings = CanvasSettings(api_key="super-secret-token", _env_file=None)
        assert settings.debug_config()["api_key"] == "***oken"


class TestValidateComplete:
    """Tests for the completeness check done before the first request."""

    def test_missing_base_url(self):
        with pytest.raises(MissingBaseUrlError):
            CanvasSettings(api_key="key", _env_file=None).validate_complete()

    def test_missing_api_key(self):
        with pytest.raises(MissingApiKeyError):
            CanvasSettings(base_url="https://canvas.test", _env_file=None).validate_complete()

    def test_api_root_without_base_url(self):
        with pytest.raises(MissingBaseUrlError):
            CanvasSettings(_env_file=None).api_root

    def test_inconsistent_retry_delays(self):
        settings = CanvasSettings(
            base_url="https://canvas.test",
            api_key="key",
            retry_delay=10,
            retry_max_delay=1,
            _env_file=None,
        )
        with pytest.raises(ConfigurationError):
            settings.validate_complete()

    def test_complete_settings(self, settings):
        assert settings.validate_complete() is settings


class TestMaskSecret:
    def test_mask(self):
        assert mask_secret("abcdefgh") == "***efgh"

    def test_empty(self):
        assert mask_secret(None) is None
        assert mask_secret("") == ""
