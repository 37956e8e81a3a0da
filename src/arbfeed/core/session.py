"""
Feed session orchestrator.

Owns the opportunity board and wires the connection layer, alert
policy, calculator and countdown tick together over the event bus.
"""

import asyncio
import logging
import signal
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from arbfeed.config.settings import Settings
from arbfeed.core.event_bus import Event, EventBus, EventType
from arbfeed.core.exceptions import SnapshotError
from arbfeed.core.types import (
    AlertIntent,
    ArbitrageOpportunity,
    BoardStats,
    ConnectionState,
    Countdown,
    ExpiryBucket,
    Notifier,
    StakePlan,
)
from arbfeed.feed.models import ArbitrageMessage, OddsUpdateMessage, StatusMessage
from arbfeed.feed.snapshot import SnapshotClient
from arbfeed.feed.websocket import ConnectionManager, Connector
from arbfeed.store.opportunities import (
    OpportunitySet,
    Snapshot,
    high_profit_only,
    snapshot_diff,
    summarize,
)
from arbfeed.strategy.calculator import ArbitrageCalculator
from arbfeed.strategy.expiry import Clock, ExpiryClock
from arbfeed.strategy.notification import NotificationPolicy
from arbfeed.telemetry.metrics import MetricsCollector
from arbfeed.telemetry.reporter import CLIReporter
from arbfeed.utils.time import get_timestamp_us, utc_now


logger = logging.getLogger(__name__)


class FeedSession:
    """
    Session controller for the live opportunity board.

    Manages the complete lifecycle of:
    - Startup snapshot loading
    - Stream connection and reconnection
    - Board updates and alerting
    - Countdown ticking
    - Reporting
    """

    def __init__(
        self,
        settings: Settings,
        notifier: Notifier | None = None,
        connector: Connector | None = None,
        snapshot_client: SnapshotClient | None = None,
        bus: EventBus | None = None,
        metrics: MetricsCollector | None = None,
        clock: Clock = utc_now,
        enable_reporter: bool = False,
    ) -> None:
        """
        Initialize the session.

        Args:
            settings: Application settings.
            notifier: Sink for alert intents.
            connector: Transport factory (default: aiohttp websocket).
            snapshot_client: Snapshot source (default: from settings).
            bus: Event bus (default: a private one).
            metrics: Metrics collector (default: a private one).
            clock: Returns the current instant for countdowns.
            enable_reporter: Draw the CLI board while running.
        """
        self._settings = settings
        self._notifier = notifier
        self._clock = clock
        self._running = False
        self._shutdown_event = asyncio.Event()

        # Infrastructure
        self._bus = bus or EventBus()
        self._metrics = metrics or MetricsCollector()

        # Board
        self._store = OpportunitySet(capacity=settings.opportunity_capacity)
        self._store.register_eviction_callback(self._on_evicted)
        self._policy = NotificationPolicy(high_profit_threshold=settings.high_profit_threshold)
        self._calculator = ArbitrageCalculator()
        self._buckets: dict[str, ExpiryBucket] = {}

        # Feed
        self._snapshot_client = snapshot_client or SnapshotClient(
            base_url=settings.feed_api_url,
            timeout=settings.snapshot_timeout,
        )
        self._connection = ConnectionManager(
            url=settings.feed_ws_url,
            bus=self._bus,
            connector=connector,
            reconnect_interval=settings.reconnect_interval,
            reconnect_multiplier=settings.reconnect_multiplier,
            max_reconnect_delay=settings.max_reconnect_delay,
            max_reconnect_attempts=settings.max_reconnect_attempts,
            metrics=self._metrics,
        )

        # Presentation
        self._expiry = ExpiryClock(
            source=self._store.snapshot,
            sink=self._on_tick,
            interval=settings.tick_interval,
            imminent_window=settings.imminent_window,
            clock=clock,
        )
        self._reporter = CLIReporter(self, self._metrics) if enable_reporter else None

        self._bus.subscribe(EventType.MESSAGE_RECEIVED, self._on_message)
        self._bus.subscribe(EventType.STATE_CHANGED, self._on_state_changed)
        self._bus.subscribe(EventType.ALERT, self._on_alert)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def connection_state(self) -> ConnectionState:
        """Get the coarse connectivity indicator."""
        return self._connection.state

    @property
    def connection(self) -> ConnectionManager:
        """Get the connection manager."""
        return self._connection

    @property
    def store(self) -> OpportunitySet:
        """Get the opportunity board."""
        return self._store

    @property
    def bus(self) -> EventBus:
        """Get the event bus."""
        return self._bus

    @property
    def metrics(self) -> MetricsCollector:
        """Get metrics collector."""
        return self._metrics

    @property
    def expiry_clock(self) -> ExpiryClock:
        """Get the countdown tick."""
        return self._expiry

    @property
    def is_running(self) -> bool:
        """Check if session is running."""
        return self._running

    # =========================================================================
    # Board Queries
    # =========================================================================

    def snapshot(self) -> Snapshot:
        """Get the current opportunities, most recently updated first."""
        return self._store.snapshot()

    def high_profit(self) -> list[ArbitrageOpportunity]:
        """Get opportunities at or above the high-profit threshold."""
        return high_profit_only(self._store.snapshot(), self._settings.high_profit_threshold)

    def countdowns(self, now: datetime | None = None) -> dict[str, Countdown]:
        """Compute countdowns for the current board at `now`."""
        return self._expiry.evaluate(self._store.snapshot(), now or self._clock())

    def stats(self) -> BoardStats:
        """Get aggregate board figures."""
        return summarize(self._store.snapshot(), self._settings.high_profit_threshold)

    def stake_plan(self, opportunity_id: str, bankroll: float | None = None) -> StakePlan:
        """
        Compute stakes for a board entry.

        Args:
            opportunity_id: Id of an opportunity on the board.
            bankroll: Amount to stake (default: configured bankroll).

        Raises:
            KeyError: If the id is not on the board.
            InvalidInputError: If the bankroll is not positive.
            NoArbitrageError: If the odds no longer guarantee a profit.
        """
        opportunity = self._store.get(opportunity_id)
        if opportunity is None:
            raise KeyError(opportunity_id)

        if bankroll is None:
            bankroll = self._settings.default_bankroll

        return self._calculator.plan_for(opportunity, bankroll)

    # =========================================================================
    # Board Updates
    # =========================================================================

    async def load_snapshot(self) -> int:
        """
        Seed the board from the snapshot endpoint.

        The seed is a baseline: it raises no alerts. On failure the board
        is left as it was and the stream fills it.

        Returns:
            Number of opportunities loaded.
        """
        try:
            opportunities = await self._snapshot_client.fetch_opportunities()
        except SnapshotError as e:
            logger.warning(f"Could not load snapshot: {e}")
            return 0

        self._store.initialize_from(opportunities)
        logger.info(f"Loaded {len(self._store)} opportunities from snapshot")
        return len(self._store)

    def apply_opportunity(self, opportunity: ArbitrageOpportunity) -> list[AlertIntent]:
        """
        Upsert one opportunity and alert on anything newly seen.

        Args:
            opportunity: Decoded opportunity from the stream.

        Returns:
            Alerts raised, in diff order.
        """
        start_time = get_timestamp_us()

        previous = self._store.snapshot()
        self._store.upsert(opportunity)
        current = self._store.snapshot()
        newly_seen = snapshot_diff(previous, current)

        self._metrics.increment_counter("opportunities_upserted")
        self._check_profit(opportunity)

        alerts = self._policy.evaluate(newly_seen)
        self._bus.emit(EventType.OPPORTUNITIES_CHANGED, tuple(newly_seen), source="session")

        for alert in alerts:
            self._metrics.increment_counter(f"alerts_{alert.tier.value}")
            self._bus.emit(EventType.ALERT, alert, source="session")

        self._metrics.record_latency("message_handling", get_timestamp_us() - start_time)
        return alerts

    def _check_profit(self, opportunity: ArbitrageOpportunity) -> None:
        """Compare the pipeline's profit figure with the odds."""
        if not opportunity.is_true_arbitrage:
            logger.warning(
                f"Odds for {opportunity.id} do not guarantee a profit "
                f"(implied total {opportunity.total_implied:.4f})"
            )
            return

        drift = self._calculator.profit_drift(opportunity)
        if abs(drift) > self._settings.profit_check_tolerance:
            logger.warning(
                f"Profit mismatch for {opportunity.id}: reported "
                f"{opportunity.profit_percent:.3f}%, odds give "
                f"{opportunity.profit_percent + drift:.3f}%"
            )

    # =========================================================================
    # Event Handlers
    # =========================================================================

    def _on_message(self, event: Event[Any]) -> None:
        """Route a decoded stream message."""
        message = event.payload

        if isinstance(message, ArbitrageMessage):
            self.apply_opportunity(message.data.to_opportunity())
        elif isinstance(message, OddsUpdateMessage):
            update = message.data
            logger.debug(
                f"Odds update: {update.bookmaker} {update.home_team} vs {update.away_team} "
                f"{update.home_odds}/{update.away_odds}"
            )
        elif isinstance(message, StatusMessage):
            status = message.data.model_dump(exclude_none=True) if message.data else {}
            logger.info(f"Server status: {status}")

    def _on_state_changed(self, event: Event[Any]) -> None:
        """Note connectivity loss; the board is kept as is."""
        if event.payload == ConnectionState.DISCONNECTED and len(self._store):
            logger.debug(f"Stream down; {len(self._store)} opportunities may be stale")

    def _on_alert(self, event: Event[Any]) -> None:
        """Deliver an alert intent to the notifier."""
        if self._notifier is not None:
            self._notifier.notify(event.payload)

    def _on_evicted(self, opportunity: ArbitrageOpportunity) -> None:
        """Count capacity evictions."""
        self._metrics.increment_counter("opportunities_evicted")
        self._buckets.pop(opportunity.id, None)
        logger.debug(f"Evicted {opportunity.id} ({opportunity.matchup})")

    def _on_tick(self, countdowns: dict[str, Countdown]) -> None:
        """Log bucket transitions between ticks."""
        for opportunity_id, countdown in countdowns.items():
            previous = self._buckets.get(opportunity_id)
            if previous is not None and previous != countdown.bucket:
                logger.debug(f"Opportunity {opportunity_id} is now {countdown.bucket.value}")

        self._buckets = {oid: c.bucket for oid, c in countdowns.items()}

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Load the snapshot, then open the stream and start ticking."""
        if self._running:
            return

        logger.info("Starting feed session...")
        self._running = True
        self._shutdown_event.clear()

        await self.load_snapshot()

        self._connection.open()
        self._expiry.start()

        if self._reporter:
            self._reporter.start()

    async def run(self) -> None:
        """Run until a shutdown signal or `request_shutdown()`."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self.request_shutdown)

        try:
            await self.start()
            await self._shutdown_event.wait()

        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
            await self.shutdown()

    def request_shutdown(self) -> None:
        """Handle shutdown signal."""
        logger.info("Shutdown signal received")
        self._shutdown_event.set()

    async def shutdown(self) -> None:
        """Gracefully shut down the session."""
        if not self._running:
            return

        logger.info("Shutting down feed session...")
        self._running = False
        self._shutdown_event.set()

        if self._reporter:
            self._reporter.stop()
            self._reporter.print_summary()

        await self._expiry.stop()
        await self._connection.close()
        await self._snapshot_client.close()

        logger.info("Feed session shutdown complete")


@asynccontextmanager
async def create_session(settings: Settings, **kwargs: Any) -> AsyncIterator[FeedSession]:
    """
    Create and manage session lifecycle.

    Usage:
        async with create_session(settings, notifier=notifier) as session:
            ...
    """
    session = FeedSession(settings, **kwargs)

    try:
        await session.start()
        yield session
    finally:
        await session.shutdown()
