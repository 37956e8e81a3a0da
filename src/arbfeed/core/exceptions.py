"""
Exception taxonomy for the feed client.

None of these is fatal: decode and transport failures are recovered
inside the connection layer, snapshot failures leave the board empty,
and calculator errors are reported to the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from arbfeed.core.types import StakePlan


class ArbFeedError(Exception):
    """Base exception for feed client errors."""


class DecodeError(ArbFeedError):
    """Inbound unit is not valid JSON or matches no known message type."""


class TransportError(ArbFeedError):
    """Connection attempt or transport failure."""


class SnapshotError(ArbFeedError):
    """Startup snapshot could not be retrieved or parsed."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class CalculatorError(ArbFeedError, ValueError):
    """Base exception for stake calculation errors."""


class InvalidInputError(CalculatorError):
    """Odds or bankroll outside their valid range."""


class NoArbitrageError(CalculatorError):
    """
    Implied probabilities sum to 1 or more.

    The inputs were valid, so the proportional allocation is still
    attached as `plan`, but it carries no profit guarantee.
    """

    def __init__(self, total_implied: float, plan: StakePlan) -> None:
        super().__init__(
            f"No arbitrage: implied probabilities sum to {total_implied:.5f} (>= 1)"
        )
        self.total_implied = total_implied
        self.plan = plan
