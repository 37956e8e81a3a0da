"""
Unit tests for Settings.
"""

import pytest
from pydantic import ValidationError

from arbfeed.config.settings import Settings, get_settings


class TestSettings:
    """Tests for settings defaults and validation."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test out-of-the-box values."""
        monkeypatch.delenv("FEED_WS_URL", raising=False)
        settings = Settings(_env_file=None)

        assert settings.feed_ws_url == "ws://localhost:8080/ws"
        assert settings.feed_api_url == "http://localhost:8080"
        assert settings.reconnect_interval == 3.0
        assert settings.reconnect_multiplier == 1.0
        assert settings.max_reconnect_attempts is None
        assert settings.opportunity_capacity == 50
        assert settings.high_profit_threshold == 2.0
        assert settings.imminent_window == 60.0
        assert settings.tick_interval == 1.0
        assert not settings.uses_backoff

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test loading from environment variables."""
        monkeypatch.setenv("FEED_WS_URL", "wss://feed.example.com/ws")
        monkeypatch.setenv("RECONNECT_MULTIPLIER", "2")
        monkeypatch.setenv("MAX_RECONNECT_ATTEMPTS", "5")

        settings = Settings(_env_file=None)

        assert settings.feed_ws_url == "wss://feed.example.com/ws"
        assert settings.uses_backoff
        assert settings.max_reconnect_attempts == 5

    def test_api_url_trailing_slash(self) -> None:
        """Test that a trailing slash is dropped."""
        settings = Settings(_env_file=None, feed_api_url="https://api.example.com/")

        assert settings.feed_api_url == "https://api.example.com"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"feed_ws_url": "http://localhost:8080/ws"},
            {"feed_api_url": "ftp://example.com"},
            {"reconnect_interval": 0},
            {"reconnect_multiplier": 0.5},
            {"reconnect_interval": 10.0, "max_reconnect_delay": 5.0},
            {"max_reconnect_attempts": 0},
            {"opportunity_capacity": 0},
            {"log_level": "TRACE"},
        ],
    )
    def test_rejects_invalid(self, overrides: dict) -> None:
        """Test validation failures."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **overrides)

    def test_get_settings_cached(self) -> None:
        """Test that one instance is shared."""
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
