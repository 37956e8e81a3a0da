"""
Type definitions for the feed client.

This module contains the dataclasses, enums and Protocol definitions
shared across the application. Domain values are frozen so snapshots
handed to the presentation layer can never be mutated in place.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Protocol


# =============================================================================
# Enums
# =============================================================================


class ConnectionState(str, Enum):
    """Stream connection state."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class OpportunityStatus(str, Enum):
    """Server-authoritative opportunity status."""

    ACTIVE = "active"
    EXPIRED = "expired"
    EXECUTED = "executed"


class ExpiryBucket(str, Enum):
    """Display bucket derived from time left until expiry."""

    ACTIVE = "active"
    IMMINENT = "imminent"
    EXPIRED = "expired"


class AlertTier(str, Enum):
    """Urgency tier of an alert for a newly-seen opportunity."""

    HIGH_PROFIT = "high_profit"
    STANDARD = "standard"


class MarketType(str, Enum):
    """Betting market of an odds update."""

    MONEYLINE = "moneyline"
    SPREAD = "spread"
    TOTAL = "total"


# =============================================================================
# Opportunity Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class ArbitrageOpportunity:
    """
    Two-way arbitrage opportunity as published by the detection pipeline.

    Stakes and returns are the pipeline's figures for its own reference
    stake and are carried as-is. Identity is `id`, stable across updates
    to the same market.
    """

    id: str
    event_id: str
    sport: str
    home_team: str
    away_team: str
    bookmaker_home: str
    bookmaker_away: str
    home_odds: float
    away_odds: float
    profit_percent: float
    home_stake: float
    away_stake: float
    total_stake: float
    expected_return: float
    created_at: datetime
    expires_at: datetime
    status: OpportunityStatus = OpportunityStatus.ACTIVE

    @property
    def matchup(self) -> str:
        """Human-readable fixture name."""
        return f"{self.home_team} vs {self.away_team}"

    @property
    def total_implied(self) -> float:
        """Sum of both sides' implied probabilities."""
        return 1.0 / self.home_odds + 1.0 / self.away_odds

    @property
    def is_true_arbitrage(self) -> bool:
        """Check if the odds actually guarantee a profit."""
        return self.total_implied < 1.0


@dataclass(slots=True, frozen=True)
class OddsUpdate:
    """Single bookmaker's odds for an event."""

    id: str
    event_id: str
    sport: str
    home_team: str
    away_team: str
    bookmaker: str
    home_odds: float
    away_odds: float
    timestamp: datetime
    market_type: MarketType = MarketType.MONEYLINE
    draw_odds: float | None = None


# =============================================================================
# Calculation Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class StakePlan:
    """
    Proportional stake allocation for a bankroll.

    `draw_stake` and `implied_draw` are zero for two-way markets.
    """

    bankroll: float
    implied_home: float
    implied_away: float
    total_implied: float
    home_stake: float
    away_stake: float
    profit_percent: float
    expected_return: float
    net_profit: float
    implied_draw: float = 0.0
    draw_stake: float = 0.0

    @property
    def total_stake(self) -> float:
        """Sum of all stakes."""
        return self.home_stake + self.draw_stake + self.away_stake

    @property
    def is_three_way(self) -> bool:
        """Check if the plan covers a draw outcome."""
        return self.implied_draw > 0.0

    def rounded(self, places: int = 2) -> "StakePlan":
        """
        Round to currency precision keeping the stakes summing to the bankroll.

        The away stake absorbs the rounding residue.
        """
        bankroll = round(self.bankroll, places)
        home = round(self.home_stake, places)
        draw = round(self.draw_stake, places)
        away = round(bankroll - home - draw, places)
        expected = round(self.expected_return, places)

        return StakePlan(
            bankroll=bankroll,
            implied_home=self.implied_home,
            implied_away=self.implied_away,
            total_implied=self.total_implied,
            home_stake=home,
            away_stake=away,
            profit_percent=self.profit_percent,
            expected_return=expected,
            net_profit=round(expected - bankroll, places),
            implied_draw=self.implied_draw,
            draw_stake=draw,
        )


# =============================================================================
# Presentation Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class Countdown:
    """Derived countdown state of one opportunity at a given instant."""

    opportunity_id: str
    bucket: ExpiryBucket
    seconds_left: float
    label: str


@dataclass(slots=True, frozen=True)
class AlertIntent:
    """
    Decision to alert about a newly-seen opportunity.

    How the alert is shown or played is up to the notifier.
    """

    tier: AlertTier
    message: str
    opportunity_id: str
    duration_s: float
    sound: str | None = None

    @property
    def is_audible(self) -> bool:
        """Check if the alert carries an audible cue."""
        return self.sound is not None


@dataclass(slots=True, frozen=True)
class BoardStats:
    """Aggregate figures for the current board."""

    total: int = 0
    average_profit: float = 0.0
    high_profit: int = 0
    best_profit: float = 0.0
    sports: frozenset[str] = field(default_factory=frozenset)


# =============================================================================
# Protocols (Interfaces)
# =============================================================================


class Notifier(Protocol):
    """Protocol for alert delivery implementations."""

    def notify(self, alert: AlertIntent) -> None:
        """Deliver one alert."""
        ...
