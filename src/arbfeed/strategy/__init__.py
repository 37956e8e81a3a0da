"""Strategy module for stake calculation, expiry and alerting."""

from arbfeed.strategy.calculator import ArbitrageCalculator
from arbfeed.strategy.expiry import ExpiryClock, bucket, countdown
from arbfeed.strategy.notification import NotificationPolicy


__all__ = [
    "ArbitrageCalculator",
    "ExpiryClock",
    "NotificationPolicy",
    "bucket",
    "countdown",
]
