"""
Pydantic models for feed messages.

Every inbound unit is a tagged envelope `{type, data, timestamp}`; the
`type` field selects the payload schema. These models validate at the
decode boundary so nothing untyped reaches the rest of the client.
"""

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from arbfeed.core.types import (
    ArbitrageOpportunity,
    MarketType,
    OddsUpdate,
    OpportunityStatus,
)
from arbfeed.utils.time import parse_timestamp


class OpportunityPayload(BaseModel):
    """Arbitrage opportunity record from the detection pipeline."""

    id: str = Field(min_length=1)
    event_id: str
    sport: str
    home_team: str
    away_team: str
    bookmaker_home: str
    bookmaker_away: str
    home_odds: float = Field(gt=1.0)
    away_odds: float = Field(gt=1.0)
    profit_percent: float
    home_stake: float = Field(ge=0.0)
    away_stake: float = Field(ge=0.0)
    total_stake: float = Field(ge=0.0)
    expected_return: float = Field(ge=0.0)
    created_at: datetime
    expires_at: datetime
    status: OpportunityStatus = OpportunityStatus.ACTIVE

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    @field_validator("created_at", "expires_at", mode="before")
    @classmethod
    def parse_times(cls, v: Any) -> Any:
        """Accept nanosecond fractions and naive values (as UTC)."""
        if isinstance(v, (str, datetime)):
            return parse_timestamp(v)
        return v

    @model_validator(mode="after")
    def validate_lifetime(self) -> "OpportunityPayload":
        """An opportunity must expire after it was created."""
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be later than created_at")
        return self

    def to_opportunity(self) -> ArbitrageOpportunity:
        """Convert to the immutable domain type."""
        return ArbitrageOpportunity(
            id=self.id,
            event_id=self.event_id,
            sport=self.sport,
            home_team=self.home_team,
            away_team=self.away_team,
            bookmaker_home=self.bookmaker_home,
            bookmaker_away=self.bookmaker_away,
            home_odds=self.home_odds,
            away_odds=self.away_odds,
            profit_percent=self.profit_percent,
            home_stake=self.home_stake,
            away_stake=self.away_stake,
            total_stake=self.total_stake,
            expected_return=self.expected_return,
            created_at=self.created_at,
            expires_at=self.expires_at,
            status=self.status,
        )


class OddsUpdatePayload(BaseModel):
    """One bookmaker's odds for an event."""

    id: str
    event_id: str
    sport: str
    home_team: str
    away_team: str
    bookmaker: str
    home_odds: float = Field(gt=1.0)
    away_odds: float = Field(gt=1.0)
    draw_odds: float | None = Field(default=None, gt=1.0)
    timestamp: datetime
    market_type: MarketType = MarketType.MONEYLINE

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_time(cls, v: Any) -> Any:
        """Accept nanosecond fractions and naive values (as UTC)."""
        if isinstance(v, (str, datetime)):
            return parse_timestamp(v)
        return v

    @field_validator("draw_odds", mode="before")
    @classmethod
    def zero_draw_is_absent(cls, v: Any) -> Any:
        """The upstream omits or zeroes draw odds for two-way markets."""
        if v == 0:
            return None
        return v

    def to_odds_update(self) -> OddsUpdate:
        """Convert to the immutable domain type."""
        return OddsUpdate(
            id=self.id,
            event_id=self.event_id,
            sport=self.sport,
            home_team=self.home_team,
            away_team=self.away_team,
            bookmaker=self.bookmaker,
            home_odds=self.home_odds,
            away_odds=self.away_odds,
            timestamp=self.timestamp,
            market_type=self.market_type,
            draw_odds=self.draw_odds,
        )


class StatusPayload(BaseModel):
    """Free-form status notice from the server."""

    status: str | None = None
    message: str | None = None

    model_config = ConfigDict(extra="allow")


# =============================================================================
# Envelopes
# =============================================================================


class ArbitrageMessage(BaseModel):
    """Envelope carrying a full opportunity record."""

    type: Literal["arbitrage"]
    data: OpportunityPayload
    timestamp: str = ""


class OddsUpdateMessage(BaseModel):
    """Envelope carrying a bookmaker odds update."""

    type: Literal["odds_update"]
    data: OddsUpdatePayload
    timestamp: str = ""


class StatusMessage(BaseModel):
    """Envelope carrying a server status notice."""

    type: Literal["status"]
    data: StatusPayload | None = None
    timestamp: str = ""


FeedMessage = Annotated[
    ArbitrageMessage | OddsUpdateMessage | StatusMessage,
    Field(discriminator="type"),
]
