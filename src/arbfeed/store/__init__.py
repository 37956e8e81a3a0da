"""Store module for the opportunity board."""

from arbfeed.store.opportunities import (
    OpportunitySet,
    Snapshot,
    high_profit_only,
    snapshot_diff,
    summarize,
)


__all__ = [
    "OpportunitySet",
    "Snapshot",
    "high_profit_only",
    "snapshot_diff",
    "summarize",
]
