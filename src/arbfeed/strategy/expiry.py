"""
Expiry bucketing and the shared countdown tick.

Buckets are derived presentation state: a pure function of the current
instant and an opportunity's expiry. One tick task re-evaluates every
visible opportunity instead of one timer per item.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from types import TracebackType

from arbfeed.config.constants import (
    COUNTDOWN_TICK_INTERVAL,
    EXPIRED_LABEL,
    IMMINENT_WINDOW_SECONDS,
)
from arbfeed.core.types import ArbitrageOpportunity, Countdown, ExpiryBucket
from arbfeed.utils.time import format_countdown, seconds_until, utc_now


logger = logging.getLogger(__name__)


# Type aliases
OpportunitySource = Callable[[], Sequence[ArbitrageOpportunity]]
CountdownSink = Callable[[dict[str, Countdown]], None]
Clock = Callable[[], datetime]


def bucket(
    now: datetime,
    expires_at: datetime,
    imminent_window: float = IMMINENT_WINDOW_SECONDS,
) -> ExpiryBucket:
    """
    Classify time left until expiry.

    Args:
        now: Current instant.
        expires_at: Expiry instant.
        imminent_window: Width of the Imminent bucket in seconds.

    Returns:
        EXPIRED if `expires_at <= now`, IMMINENT if at most
        `imminent_window` seconds remain, ACTIVE otherwise.
    """
    remaining = seconds_until(expires_at, now)

    if remaining <= 0:
        return ExpiryBucket.EXPIRED
    if remaining <= imminent_window:
        return ExpiryBucket.IMMINENT
    return ExpiryBucket.ACTIVE


def countdown(
    opportunity: ArbitrageOpportunity,
    now: datetime,
    imminent_window: float = IMMINENT_WINDOW_SECONDS,
) -> Countdown:
    """Build the countdown state of one opportunity at `now`."""
    remaining = seconds_until(opportunity.expires_at, now)
    state = bucket(now, opportunity.expires_at, imminent_window)
    label = EXPIRED_LABEL if state == ExpiryBucket.EXPIRED else format_countdown(remaining)

    return Countdown(
        opportunity_id=opportunity.id,
        bucket=state,
        seconds_left=max(remaining, 0.0),
        label=label,
    )


class ExpiryClock:
    """
    Single repeating tick feeding per-item countdowns to a sink.

    The clock never touches stored opportunities; it reads them through
    `source` and hands derived countdowns to `sink`. Stop it when the
    owning view goes away, or use it as an async context manager.
    """

    def __init__(
        self,
        source: OpportunitySource,
        sink: CountdownSink | None = None,
        interval: float = COUNTDOWN_TICK_INTERVAL,
        imminent_window: float = IMMINENT_WINDOW_SECONDS,
        clock: Clock = utc_now,
    ) -> None:
        """
        Initialize expiry clock.

        Args:
            source: Returns the opportunities currently visible.
            sink: Receives `id -> Countdown` on every tick.
            interval: Tick period in seconds.
            imminent_window: Width of the Imminent bucket in seconds.
            clock: Returns the current instant (aware UTC).
        """
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive: {interval}")

        self._source = source
        self._sink = sink
        self._interval = interval
        self._imminent_window = imminent_window
        self._clock = clock
        self._task: asyncio.Task[None] | None = None
        self._tick_count = 0
        self._latest: dict[str, Countdown] = {}

    @property
    def is_running(self) -> bool:
        """Check if the tick task is active."""
        return self._task is not None and not self._task.done()

    @property
    def tick_count(self) -> int:
        """Get number of ticks delivered."""
        return self._tick_count

    @property
    def latest(self) -> dict[str, Countdown]:
        """Get countdowns from the most recent tick."""
        return dict(self._latest)

    def evaluate(
        self,
        opportunities: Iterable[ArbitrageOpportunity],
        now: datetime,
    ) -> dict[str, Countdown]:
        """
        Compute countdowns for opportunities at `now`.

        Pure: holds no state and may be called at any time.
        """
        return {
            o.id: countdown(o, now, self._imminent_window)
            for o in opportunities
        }

    def tick(self) -> dict[str, Countdown]:
        """Evaluate the current source once and deliver to the sink."""
        countdowns = self.evaluate(self._source(), self._clock())
        self._latest = countdowns
        self._tick_count += 1

        if self._sink is not None:
            try:
                self._sink(countdowns)
            except Exception as e:
                logger.error(f"Countdown sink error: {e}", exc_info=True)

        return countdowns

    def start(self) -> asyncio.Task[None]:
        """Start the tick task (no-op if already running)."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())
        return self._task

    async def stop(self) -> None:
        """Cancel the tick task and wait for it to finish."""
        task = self._task
        self._task = None

        if task and not task.done():
            task.cancel()
            try:
                await asyncio.wait_for(task, timeout=1.0)
            except (TimeoutError, asyncio.CancelledError):
                pass

    async def _run(self) -> None:
        """Tick loop."""
        while True:
            self.tick()
            await asyncio.sleep(self._interval)

    async def __aenter__(self) -> "ExpiryClock":
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.stop()
