"""Odds conversion helpers."""

import math


def is_valid_decimal_odds(odds: float) -> bool:
    """Check that decimal odds are finite and greater than 1."""
    return math.isfinite(odds) and odds > 1.0


def implied_probability(odds: float) -> float:
    """
    Convert decimal odds to implied probability.

    Args:
        odds: Decimal odds (> 1).

    Returns:
        Implied probability in (0, 1).
    """
    return 1.0 / odds


def decimal_to_american(odds: float) -> str:
    """
    Convert decimal odds to an American odds string.

    Examples:
        >>> decimal_to_american(2.20)
        '+120'
        >>> decimal_to_american(1.91)
        '-110'
    """
    if odds >= 2.0:
        return f"+{(odds - 1.0) * 100:.0f}"
    return f"{-100.0 / (odds - 1.0):.0f}"


def american_to_decimal(american: float) -> float:
    """
    Convert American odds to decimal odds.

    Raises:
        ValueError: If the value lies strictly between -100 and +100.
    """
    if american >= 100:
        return 1.0 + american / 100.0
    if american <= -100:
        return 1.0 + 100.0 / abs(american)
    raise ValueError(f"American odds must be <= -100 or >= +100: {american}")
