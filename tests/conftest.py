"""
Pytest configuration and shared fixtures.

Provides reusable test fixtures for all test modules.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from arbfeed.config.settings import Settings
from arbfeed.core.event_bus import EventBus
from arbfeed.core.types import ArbitrageOpportunity, OpportunityStatus
from arbfeed.strategy.calculator import ArbitrageCalculator
from arbfeed.telemetry.metrics import MetricsCollector


# Type aliases
OpportunityFactory = Callable[..., ArbitrageOpportunity]
PayloadFactory = Callable[..., dict[str, Any]]


# =============================================================================
# Time Fixtures
# =============================================================================


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant."""
    return datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)


# =============================================================================
# Opportunity Fixtures
# =============================================================================


def _profit_for(home_odds: float, away_odds: float) -> float:
    """Guaranteed profit percent for a pair of odds."""
    return (1.0 / (1.0 / home_odds + 1.0 / away_odds) - 1.0) * 100.0


@pytest.fixture
def make_opportunity(now: datetime) -> OpportunityFactory:
    """Factory for opportunities whose figures agree with their odds."""

    def _make(
        id: str = "opp-1",
        home_odds: float = 1.91,
        away_odds: float = 2.20,
        profit_percent: float | None = None,
        expires_in: float = 300.0,
        home_team: str = "Lakers",
        away_team: str = "Celtics",
        sport: str = "basketball_nba",
        **overrides: Any,
    ) -> ArbitrageOpportunity:
        total_implied = 1.0 / home_odds + 1.0 / away_odds
        fields: dict[str, Any] = {
            "id": id,
            "event_id": f"evt-{id}",
            "sport": sport,
            "home_team": home_team,
            "away_team": away_team,
            "bookmaker_home": "DraftKings",
            "bookmaker_away": "FanDuel",
            "home_odds": home_odds,
            "away_odds": away_odds,
            "profit_percent": (
                _profit_for(home_odds, away_odds) if profit_percent is None else profit_percent
            ),
            "home_stake": 1000.0 * (1.0 / home_odds) / total_implied,
            "away_stake": 1000.0 * (1.0 / away_odds) / total_implied,
            "total_stake": 1000.0,
            "expected_return": 1000.0 / total_implied,
            "created_at": now - timedelta(seconds=10),
            "expires_at": now + timedelta(seconds=expires_in),
            "status": OpportunityStatus.ACTIVE,
        }
        fields.update(overrides)
        return ArbitrageOpportunity(**fields)

    return _make


@pytest.fixture
def make_payload(now: datetime) -> PayloadFactory:
    """Factory for wire-format opportunity records."""

    def _make(
        id: str = "opp-1",
        home_odds: float = 1.91,
        away_odds: float = 2.20,
        expires_in: float = 300.0,
        **overrides: Any,
    ) -> dict[str, Any]:
        total_implied = 1.0 / home_odds + 1.0 / away_odds
        payload: dict[str, Any] = {
            "id": id,
            "event_id": f"evt-{id}",
            "sport": "basketball_nba",
            "home_team": "Lakers",
            "away_team": "Celtics",
            "bookmaker_home": "DraftKings",
            "bookmaker_away": "FanDuel",
            "home_odds": home_odds,
            "away_odds": away_odds,
            "profit_percent": _profit_for(home_odds, away_odds),
            "home_stake": 1000.0 * (1.0 / home_odds) / total_implied,
            "away_stake": 1000.0 * (1.0 / away_odds) / total_implied,
            "total_stake": 1000.0,
            "expected_return": 1000.0 / total_implied,
            "created_at": (now - timedelta(seconds=10)).isoformat().replace("+00:00", "Z"),
            "expires_at": (now + timedelta(seconds=expires_in)).isoformat().replace("+00:00", "Z"),
            "status": "active",
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def make_envelope(make_payload: PayloadFactory) -> Callable[..., dict[str, Any]]:
    """Factory for `arbitrage` stream envelopes."""

    def _make(**kwargs: Any) -> dict[str, Any]:
        return {
            "type": "arbitrage",
            "data": make_payload(**kwargs),
            "timestamp": "2024-06-01T12:00:00Z",
        }

    return _make


# =============================================================================
# Component Fixtures
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings with short timings and no .env lookup."""
    return Settings(
        _env_file=None,
        reconnect_interval=0.01,
        max_reconnect_delay=0.05,
        tick_interval=0.01,
        use_uvloop=False,
    )


@pytest.fixture
def event_bus() -> EventBus:
    """Empty event bus."""
    return EventBus()


@pytest.fixture
def metrics() -> MetricsCollector:
    """Fresh metrics collector."""
    return MetricsCollector()


@pytest.fixture
def calculator() -> ArbitrageCalculator:
    """Arbitrage calculator."""
    return ArbitrageCalculator()
