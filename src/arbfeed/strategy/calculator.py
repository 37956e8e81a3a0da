"""
Arbitrage stake calculation.

Splits a bankroll across the outcomes of one market in proportion to
their implied probabilities, which pays the same amount whichever side
wins. Refuses to report a guaranteed profit the odds cannot back.
"""

import logging
import math

from arbfeed.core.exceptions import InvalidInputError, NoArbitrageError
from arbfeed.core.types import ArbitrageOpportunity, StakePlan
from arbfeed.utils.odds import implied_probability, is_valid_decimal_odds


logger = logging.getLogger(__name__)


class ArbitrageCalculator:
    """
    Calculates stakes and returns for two- and three-way markets.

    Stateless: every method is a pure function of its arguments. Plain
    float arithmetic; use `StakePlan.rounded()` for currency figures.
    """

    __slots__ = ()

    def compute_stakes(
        self,
        home_odds: float,
        away_odds: float,
        bankroll: float,
    ) -> StakePlan:
        """
        Compute stakes for a two-way market.

        Args:
            home_odds: Decimal odds for the home side (> 1).
            away_odds: Decimal odds for the away side (> 1).
            bankroll: Total amount to stake (> 0).

        Returns:
            StakePlan whose stakes sum to the bankroll.

        Raises:
            InvalidInputError: If odds are <= 1 or bankroll <= 0.
            NoArbitrageError: If implied probabilities sum to 1 or more.

        Example:
            >>> plan = ArbitrageCalculator().compute_stakes(1.91, 2.20, 1000)
            >>> round(plan.home_stake, 2), round(plan.net_profit, 2)
            (535.28, 22.38)
        """
        self._validate_odds(home=home_odds, away=away_odds)
        self._validate_bankroll(bankroll)

        implied_home = implied_probability(home_odds)
        implied_away = implied_probability(away_odds)
        total_implied = implied_home + implied_away

        home_stake = bankroll * implied_home / total_implied
        plan = self._build_plan(
            bankroll=bankroll,
            implied_home=implied_home,
            implied_away=implied_away,
            total_implied=total_implied,
            home_stake=home_stake,
            away_stake=bankroll - home_stake,
        )

        if total_implied >= 1.0:
            raise NoArbitrageError(total_implied, plan)

        return plan

    def compute_three_way_stakes(
        self,
        home_odds: float,
        draw_odds: float,
        away_odds: float,
        bankroll: float,
    ) -> StakePlan:
        """
        Compute stakes for a market with a draw outcome.

        Same allocation and guards as `compute_stakes`.

        Raises:
            InvalidInputError: If any odds are <= 1 or bankroll <= 0.
            NoArbitrageError: If implied probabilities sum to 1 or more.
        """
        self._validate_odds(home=home_odds, draw=draw_odds, away=away_odds)
        self._validate_bankroll(bankroll)

        implied_home = implied_probability(home_odds)
        implied_draw = implied_probability(draw_odds)
        implied_away = implied_probability(away_odds)
        total_implied = implied_home + implied_draw + implied_away

        home_stake = bankroll * implied_home / total_implied
        draw_stake = bankroll * implied_draw / total_implied
        plan = self._build_plan(
            bankroll=bankroll,
            implied_home=implied_home,
            implied_away=implied_away,
            total_implied=total_implied,
            home_stake=home_stake,
            away_stake=bankroll - home_stake - draw_stake,
            implied_draw=implied_draw,
            draw_stake=draw_stake,
        )

        if total_implied >= 1.0:
            raise NoArbitrageError(total_implied, plan)

        return plan

    def plan_for(self, opportunity: ArbitrageOpportunity, bankroll: float) -> StakePlan:
        """Compute stakes for an opportunity's odds with a chosen bankroll."""
        return self.compute_stakes(opportunity.home_odds, opportunity.away_odds, bankroll)

    def profit_drift(self, opportunity: ArbitrageOpportunity) -> float:
        """
        Difference between recomputed and pipeline-reported profit.

        Returns:
            Recomputed `profit_percent` minus the reported one, in
            percentage points. Negative when the odds back less profit
            than was claimed.
        """
        total_implied = opportunity.total_implied
        recomputed = (1.0 / total_implied - 1.0) * 100.0
        return recomputed - opportunity.profit_percent

    @staticmethod
    def profit_percent(total_implied: float) -> float:
        """Guaranteed return percentage for a given implied total."""
        return (1.0 / total_implied - 1.0) * 100.0

    def _build_plan(
        self,
        bankroll: float,
        implied_home: float,
        implied_away: float,
        total_implied: float,
        home_stake: float,
        away_stake: float,
        implied_draw: float = 0.0,
        draw_stake: float = 0.0,
    ) -> StakePlan:
        """Derive return figures and assemble the plan."""
        profit_percent = self.profit_percent(total_implied)
        expected_return = bankroll * (1.0 + profit_percent / 100.0)

        return StakePlan(
            bankroll=bankroll,
            implied_home=implied_home,
            implied_away=implied_away,
            total_implied=total_implied,
            home_stake=home_stake,
            away_stake=away_stake,
            profit_percent=profit_percent,
            expected_return=expected_return,
            net_profit=expected_return - bankroll,
            implied_draw=implied_draw,
            draw_stake=draw_stake,
        )

    @staticmethod
    def _validate_odds(**odds: float) -> None:
        """Reject odds that are not finite and above 1."""
        for side, value in odds.items():
            if not is_valid_decimal_odds(value):
                raise InvalidInputError(f"{side} odds must be greater than 1, got {value}")

    @staticmethod
    def _validate_bankroll(bankroll: float) -> None:
        """Reject a bankroll that is not finite and positive."""
        if not math.isfinite(bankroll) or bankroll <= 0:
            raise InvalidInputError(f"Bankroll must be positive, got {bankroll}")
