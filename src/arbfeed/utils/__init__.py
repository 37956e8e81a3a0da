"""Utility functions for the feed client."""

from arbfeed.utils.odds import (
    american_to_decimal,
    decimal_to_american,
    implied_probability,
    is_valid_decimal_odds,
)
from arbfeed.utils.time import (
    format_countdown,
    get_timestamp_us,
    parse_timestamp,
    seconds_until,
    utc_now,
)


__all__ = [
    "american_to_decimal",
    "decimal_to_american",
    "format_countdown",
    "get_timestamp_us",
    "implied_probability",
    "is_valid_decimal_odds",
    "parse_timestamp",
    "seconds_until",
    "utc_now",
]
