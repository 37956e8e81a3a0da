"""
Mock snapshot source and alert sink for session tests.
"""

from arbfeed.core.exceptions import SnapshotError
from arbfeed.core.types import AlertIntent, ArbitrageOpportunity


class StaticSnapshotClient:
    """Snapshot client returning a fixed list or failing."""

    def __init__(
        self,
        opportunities: list[ArbitrageOpportunity] | None = None,
        error: SnapshotError | None = None,
    ) -> None:
        """Initialize with canned results."""
        self._opportunities = opportunities or []
        self._error = error
        self.fetch_calls = 0
        self.closed = False

    async def fetch_opportunities(self) -> list[ArbitrageOpportunity]:
        """Return the canned snapshot."""
        self.fetch_calls += 1
        if self._error is not None:
            raise self._error
        return list(self._opportunities)

    async def close(self) -> None:
        """Mark as closed."""
        self.closed = True


class RecordingNotifier:
    """Notifier keeping every alert it receives."""

    def __init__(self) -> None:
        """Initialize recorder."""
        self.alerts: list[AlertIntent] = []

    def notify(self, alert: AlertIntent) -> None:
        """Record an alert."""
        self.alerts.append(alert)

    @property
    def ids(self) -> list[str]:
        """Get alerted opportunity ids in order."""
        return [a.opportunity_id for a in self.alerts]
