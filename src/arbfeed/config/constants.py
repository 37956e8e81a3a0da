"""
Feed constants and configuration values.

This module contains all hardcoded values used throughout the feed client.
Values are organized by category for easy maintenance and auditing.
"""

from typing import Final


# =============================================================================
# Feed Endpoints
# =============================================================================

DEFAULT_WS_URL: Final[str] = "ws://localhost:8080/ws"
DEFAULT_API_URL: Final[str] = "http://localhost:8080"

# API Endpoints
ENDPOINT_ARBITRAGE: Final[str] = "/api/arbitrage"


# =============================================================================
# Message Types
# =============================================================================

MESSAGE_TYPE_ARBITRAGE: Final[str] = "arbitrage"
MESSAGE_TYPE_ODDS_UPDATE: Final[str] = "odds_update"
MESSAGE_TYPE_STATUS: Final[str] = "status"


# =============================================================================
# Reconnection Strategy
# =============================================================================

DEFAULT_RECONNECT_INTERVAL: Final[float] = 3.0  # seconds
MAX_RECONNECT_DELAY: Final[float] = 30.0  # seconds

# 1.0 keeps the interval fixed; anything larger grows it per failed attempt
RECONNECT_MULTIPLIER: Final[float] = 1.0


# =============================================================================
# WebSocket Configuration
# =============================================================================

WS_PING_INTERVAL: Final[float] = 20.0  # seconds
WS_MAX_MESSAGE_SIZE: Final[int] = 4 * 1024 * 1024  # 4MB
WS_CLOSE_TIMEOUT: Final[float] = 5.0  # seconds

SNAPSHOT_TIMEOUT: Final[float] = 10.0  # seconds


# =============================================================================
# Opportunity Board
# =============================================================================

# Most-recently-updated entries kept; older ones are evicted from the tail
OPPORTUNITY_CAPACITY: Final[int] = 50

# Opportunities at or above this profit are flagged as high profit (percent)
HIGH_PROFIT_THRESHOLD_PCT: Final[float] = 2.0


# =============================================================================
# Alerts
# =============================================================================

HIGH_PROFIT_ALERT_DURATION: Final[float] = 10.0  # seconds
STANDARD_ALERT_DURATION: Final[float] = 5.0  # seconds

HIGH_PROFIT_SOUND: Final[str] = "notification"


# =============================================================================
# Countdown
# =============================================================================

IMMINENT_WINDOW_SECONDS: Final[float] = 60.0
COUNTDOWN_TICK_INTERVAL: Final[float] = 1.0  # seconds

EXPIRED_LABEL: Final[str] = "Expired"


# =============================================================================
# Stake Calculation
# =============================================================================

DEFAULT_BANKROLL: Final[float] = 1000.0

CURRENCY_PRECISION: Final[int] = 2
PERCENTAGE_PRECISION: Final[int] = 2

# Maximum allowed drift between pipeline and recomputed profit (percent)
PROFIT_CHECK_TOLERANCE: Final[float] = 0.01


# =============================================================================
# Logging & Telemetry
# =============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# Board redraw interval (seconds)
REPORT_INTERVAL: Final[float] = 1.0

# Rows shown on the CLI board
REPORT_MAX_ROWS: Final[int] = 10

# Maximum log queue size
MAX_LOG_QUEUE_SIZE: Final[int] = 10_000
