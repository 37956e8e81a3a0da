"""Configuration module for the feed client."""

from arbfeed.config.constants import (
    DEFAULT_API_URL,
    DEFAULT_RECONNECT_INTERVAL,
    DEFAULT_WS_URL,
    HIGH_PROFIT_THRESHOLD_PCT,
    OPPORTUNITY_CAPACITY,
)
from arbfeed.config.settings import Settings, get_settings


__all__ = [
    "Settings",
    "get_settings",
    "DEFAULT_API_URL",
    "DEFAULT_RECONNECT_INTERVAL",
    "DEFAULT_WS_URL",
    "HIGH_PROFIT_THRESHOLD_PCT",
    "OPPORTUNITY_CAPACITY",
]
