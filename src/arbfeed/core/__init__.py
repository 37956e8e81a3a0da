"""Core module containing the event bus, exceptions, and type definitions."""

from arbfeed.core.event_bus import Event, EventBus, EventType
from arbfeed.core.exceptions import (
    ArbFeedError,
    CalculatorError,
    DecodeError,
    InvalidInputError,
    NoArbitrageError,
    SnapshotError,
    TransportError,
)
from arbfeed.core.types import (
    AlertIntent,
    AlertTier,
    ArbitrageOpportunity,
    BoardStats,
    ConnectionState,
    Countdown,
    ExpiryBucket,
    MarketType,
    Notifier,
    OddsUpdate,
    OpportunityStatus,
    StakePlan,
)


__all__ = [
    "AlertIntent",
    "AlertTier",
    "ArbFeedError",
    "ArbitrageOpportunity",
    "BoardStats",
    "CalculatorError",
    "ConnectionState",
    "Countdown",
    "DecodeError",
    "Event",
    "EventBus",
    "EventType",
    "ExpiryBucket",
    "InvalidInputError",
    "MarketType",
    "NoArbitrageError",
    "Notifier",
    "OddsUpdate",
    "OpportunityStatus",
    "SnapshotError",
    "StakePlan",
    "TransportError",
]
