"""
Alert policy for newly-seen opportunities.

Only ids absent from the previous snapshot produce alerts, so an update
to a known opportunity never alerts twice.
"""

from collections.abc import Iterable

from arbfeed.config.constants import (
    HIGH_PROFIT_ALERT_DURATION,
    HIGH_PROFIT_SOUND,
    HIGH_PROFIT_THRESHOLD_PCT,
    STANDARD_ALERT_DURATION,
)
from arbfeed.core.types import AlertIntent, AlertTier, ArbitrageOpportunity


class NotificationPolicy:
    """Classifies newly-seen opportunities into alert tiers."""

    __slots__ = ("_threshold", "_high_duration", "_standard_duration", "_sound")

    def __init__(
        self,
        high_profit_threshold: float = HIGH_PROFIT_THRESHOLD_PCT,
        high_profit_duration: float = HIGH_PROFIT_ALERT_DURATION,
        standard_duration: float = STANDARD_ALERT_DURATION,
        sound: str = HIGH_PROFIT_SOUND,
    ) -> None:
        """
        Initialize policy.

        Args:
            high_profit_threshold: Profit percent at or above which an
                opportunity is HIGH_PROFIT.
            high_profit_duration: Display duration of high-profit alerts.
            standard_duration: Display duration of standard alerts.
            sound: Audible cue name for high-profit alerts.
        """
        self._threshold = high_profit_threshold
        self._high_duration = high_profit_duration
        self._standard_duration = standard_duration
        self._sound = sound

    @property
    def high_profit_threshold(self) -> float:
        """Get the high-profit boundary (percent)."""
        return self._threshold

    def classify(self, opportunity: ArbitrageOpportunity) -> AlertTier:
        """Get the alert tier for an opportunity."""
        if opportunity.profit_percent >= self._threshold:
            return AlertTier.HIGH_PROFIT
        return AlertTier.STANDARD

    def build_alert(self, opportunity: ArbitrageOpportunity) -> AlertIntent:
        """
        Build the alert for one newly-seen opportunity.

        Args:
            opportunity: Opportunity not present in the previous snapshot.

        Returns:
            AlertIntent naming the teams and profit percentage.
        """
        tier = self.classify(opportunity)
        pct = f"{opportunity.profit_percent:.2f}%"

        if tier == AlertTier.HIGH_PROFIT:
            return AlertIntent(
                tier=tier,
                message=f"HIGH PROFIT: {pct} - {opportunity.matchup}",
                opportunity_id=opportunity.id,
                duration_s=self._high_duration,
                sound=self._sound,
            )

        return AlertIntent(
            tier=tier,
            message=f"New arbitrage: {pct} - {opportunity.matchup}",
            opportunity_id=opportunity.id,
            duration_s=self._standard_duration,
        )

    def evaluate(self, newly_seen: Iterable[ArbitrageOpportunity]) -> list[AlertIntent]:
        """One alert per newly-seen opportunity, in diff order."""
        return [self.build_alert(o) for o in newly_seen]
