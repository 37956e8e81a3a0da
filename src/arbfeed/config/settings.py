"""
Application settings with environment variable support.

Uses Pydantic Settings for type-safe configuration with automatic
environment variable loading and validation.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from arbfeed.config.constants import (
    COUNTDOWN_TICK_INTERVAL,
    DEFAULT_API_URL,
    DEFAULT_BANKROLL,
    DEFAULT_RECONNECT_INTERVAL,
    DEFAULT_WS_URL,
    HIGH_PROFIT_THRESHOLD_PCT,
    IMMINENT_WINDOW_SECONDS,
    MAX_RECONNECT_DELAY,
    OPPORTUNITY_CAPACITY,
    PROFIT_CHECK_TOLERANCE,
    RECONNECT_MULTIPLIER,
    SNAPSHOT_TIMEOUT,
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Feed Endpoints
    # =========================================================================

    feed_ws_url: str = Field(
        default=DEFAULT_WS_URL,
        description="WebSocket endpoint streaming opportunity updates",
    )
    feed_api_url: str = Field(
        default=DEFAULT_API_URL,
        description="Base URL of the REST API serving the startup snapshot",
    )

    # =========================================================================
    # Reconnection
    # =========================================================================

    reconnect_interval: float = Field(
        default=DEFAULT_RECONNECT_INTERVAL,
        gt=0.0,
        le=300.0,
        description="Delay before reconnecting after the stream drops (seconds)",
    )

    reconnect_multiplier: float = Field(
        default=RECONNECT_MULTIPLIER,
        ge=1.0,
        le=10.0,
        description="Delay growth per consecutive failed attempt (1.0 = fixed interval)",
    )

    max_reconnect_delay: float = Field(
        default=MAX_RECONNECT_DELAY,
        gt=0.0,
        le=3600.0,
        description="Upper bound for the reconnect delay (seconds)",
    )

    max_reconnect_attempts: int | None = Field(
        default=None,
        ge=1,
        description="Consecutive failed attempts before giving up (None = retry forever)",
    )

    # =========================================================================
    # Board & Alerts
    # =========================================================================

    opportunity_capacity: int = Field(
        default=OPPORTUNITY_CAPACITY,
        ge=1,
        le=1000,
        description="Maximum number of opportunities kept on the board",
    )

    high_profit_threshold: float = Field(
        default=HIGH_PROFIT_THRESHOLD_PCT,
        ge=0.0,
        le=100.0,
        description="Profit percentage at which an opportunity is high profit",
    )

    imminent_window: float = Field(
        default=IMMINENT_WINDOW_SECONDS,
        gt=0.0,
        description="Seconds before expiry at which an opportunity is imminent",
    )

    tick_interval: float = Field(
        default=COUNTDOWN_TICK_INTERVAL,
        gt=0.0,
        le=60.0,
        description="Countdown refresh interval (seconds)",
    )

    # =========================================================================
    # Calculator
    # =========================================================================

    default_bankroll: float = Field(
        default=DEFAULT_BANKROLL,
        gt=0.0,
        description="Bankroll preset for stake calculations",
    )

    profit_check_tolerance: float = Field(
        default=PROFIT_CHECK_TOLERANCE,
        ge=0.0,
        description="Allowed drift between pipeline and recomputed profit (percent)",
    )

    # =========================================================================
    # Snapshot
    # =========================================================================

    snapshot_timeout: float = Field(
        default=SNAPSHOT_TIMEOUT,
        gt=0.0,
        le=120.0,
        description="Timeout for the startup snapshot request (seconds)",
    )

    # =========================================================================
    # Operation Mode
    # =========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional file receiving a copy of all log output",
    )

    use_uvloop: bool = Field(
        default=True,
        description="Use uvloop for improved async performance",
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("feed_ws_url", mode="after")
    @classmethod
    def validate_ws_url(cls, v: str) -> str:
        """Ensure the stream endpoint uses a websocket scheme."""
        if not v.startswith(("ws://", "wss://")):
            raise ValueError(f"WebSocket URL must start with ws:// or wss://: {v}")
        return v

    @field_validator("feed_api_url", mode="after")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Ensure the API endpoint is HTTP(S) and drop any trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"API URL must start with http:// or https://: {v}")
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_reconnect_bounds(self) -> "Settings":
        """The delay ceiling cannot be below the base interval."""
        if self.max_reconnect_delay < self.reconnect_interval:
            raise ValueError(
                f"max_reconnect_delay ({self.max_reconnect_delay}) must be >= "
                f"reconnect_interval ({self.reconnect_interval})"
            )
        return self

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def uses_backoff(self) -> bool:
        """Check if the reconnect delay grows between attempts."""
        return self.reconnect_multiplier > 1.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are loaded only once.
    Clear cache with `get_settings.cache_clear()` if needed.
    """
    return Settings()
