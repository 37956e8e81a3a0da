"""
CLI reporter for the live opportunity board.

Provides a terminal display of connection status, board statistics
and the most recent opportunities with their countdowns.
"""

import asyncio
import sys
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Protocol, TextIO

from arbfeed import __version__
from arbfeed.config.constants import REPORT_INTERVAL, REPORT_MAX_ROWS
from arbfeed.core.types import (
    ArbitrageOpportunity,
    BoardStats,
    ConnectionState,
    Countdown,
    ExpiryBucket,
)
from arbfeed.telemetry.metrics import MetricsCollector
from arbfeed.utils.odds import decimal_to_american
from arbfeed.utils.time import utc_now


class BoardView(Protocol):
    """Read-only board state the reporter renders."""

    @property
    def connection_state(self) -> ConnectionState:
        """Current connection state."""
        ...

    def snapshot(self) -> Sequence[ArbitrageOpportunity]:
        """Current opportunities, most recent first."""
        ...

    def countdowns(self, now: datetime | None = None) -> dict[str, Countdown]:
        """Countdown state per opportunity id."""
        ...

    def stats(self) -> BoardStats:
        """Aggregate board figures."""
        ...


class CLIReporter:
    """
    Real-time CLI board.

    Displays a formatted panel with:
    - Connection indicator
    - Board statistics
    - Latest opportunities with expiry countdowns
    """

    # Box drawing characters
    BOX_TL = "\u2554"  # ╔
    BOX_TR = "\u2557"  # ╗
    BOX_BL = "\u255a"  # ╚
    BOX_BR = "\u255d"  # ╝
    BOX_H = "\u2550"  # ═
    BOX_V = "\u2551"  # ║
    BOX_LT = "\u2560"  # ╠
    BOX_RT = "\u2563"  # ╣
    THIN_V = "\u2502"  # │

    STATE_INDICATORS = {
        ConnectionState.CONNECTED: "\u25cf LIVE",  # ●
        ConnectionState.CONNECTING: "\u25d0 CONNECTING",  # ◐
        ConnectionState.DISCONNECTED: "\u25cb DISCONNECTED",  # ○
    }

    BUCKET_MARKS = {
        ExpiryBucket.ACTIVE: " ",
        ExpiryBucket.IMMINENT: "!",
        ExpiryBucket.EXPIRED: "x",
    }

    def __init__(
        self,
        board: BoardView,
        metrics: MetricsCollector,
        width: int = 78,
        max_rows: int = REPORT_MAX_ROWS,
        output: TextIO | None = None,
    ) -> None:
        """
        Initialize CLI reporter.

        Args:
            board: Session exposing the board state.
            metrics: Metrics collector instance.
            width: Display width in characters.
            max_rows: Opportunities listed at most.
            output: Output stream (default: stdout).
        """
        self._board = board
        self._metrics = metrics
        self._width = width
        self._max_rows = max_rows
        self._output = output or sys.stdout
        self._running = False
        self._task: asyncio.Task[None] | None = None

    def _format_uptime(self, seconds: float) -> str:
        """Format uptime as HH:MM:SS."""
        td = timedelta(seconds=int(seconds))
        hours, remainder = divmod(int(td.total_seconds()), 3600)
        minutes, secs = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"

    def _pad(self, text: str, width: int) -> str:
        """Pad text to width."""
        return text.ljust(width)[:width]

    def _line(self, left: str, content: str, right: str) -> str:
        """Create a line with borders."""
        inner_width = self._width - 2
        return f"{left}{self._pad(content, inner_width)}{right}"

    def _divider(self, left: str = BOX_LT, right: str = BOX_RT) -> str:
        """Create a horizontal divider."""
        return f"{left}{self.BOX_H * (self._width - 2)}{right}"

    def _row(self, opportunity: ArbitrageOpportunity, countdown: Countdown | None) -> str:
        """Format one opportunity row."""
        label = countdown.label if countdown else "---"
        mark = self.BUCKET_MARKS[countdown.bucket] if countdown else " "
        books = f"{opportunity.bookmaker_home}/{opportunity.bookmaker_away}"
        odds = (
            f"{decimal_to_american(opportunity.home_odds)}/"
            f"{decimal_to_american(opportunity.away_odds)}"
        )

        return (
            f"  {opportunity.profit_percent:>6.2f}% {self.THIN_V} "
            f"{self._pad(opportunity.matchup, 22)} {self.THIN_V} "
            f"{self._pad(books, 16)} {self.THIN_V} "
            f"{self._pad(odds, 9)} {self.THIN_V} {mark}{label:>7}"
        )

    def render(self, now: datetime | None = None) -> str:
        """
        Render the board.

        Args:
            now: Instant for countdowns (default: current time).

        Returns:
            Formatted board string.
        """
        now = now or utc_now()
        state = self._board.connection_state
        stats = self._board.stats()
        opportunities = self._board.snapshot()[: self._max_rows]
        countdowns = self._board.countdowns(now)
        uptime = self._format_uptime(self._metrics.uptime_seconds)
        feed = self._metrics.feed_stats

        lines = []

        # Header
        lines.append(f"{self.BOX_TL}{self.BOX_H * (self._width - 2)}{self.BOX_TR}")
        header = f"  ARBFEED v{__version__} | {self.STATE_INDICATORS[state]}"
        lines.append(self._line(self.BOX_V, header, self.BOX_V))
        lines.append(self._divider())

        # Status rows
        status = (
            f"  Uptime: {uptime}  |  Messages: {feed.messages_received:,}"
            f"  |  Dropped: {feed.decode_errors:,}  |  Alerts: {feed.alerts_total:,}"
        )
        lines.append(self._line(self.BOX_V, status, self.BOX_V))

        board = (
            f"  Opportunities: {stats.total}  |  High profit: {stats.high_profit}"
            f"  |  Avg: {stats.average_profit:.2f}%  |  Best: {stats.best_profit:.2f}%"
        )
        lines.append(self._line(self.BOX_V, board, self.BOX_V))
        lines.append(self._divider())

        # Opportunity rows
        if opportunities:
            header_line = (
                f"  {'PROFIT':>7} {self.THIN_V} {self._pad('MATCHUP', 22)} {self.THIN_V} "
                f"{self._pad('BOOKMAKERS', 16)} {self.THIN_V} "
                f"{self._pad('ODDS', 9)} {self.THIN_V} {'EXPIRES':>8}"
            )
            lines.append(self._line(self.BOX_V, header_line, self.BOX_V))
            for opportunity in opportunities:
                row = self._row(opportunity, countdowns.get(opportunity.id))
                lines.append(self._line(self.BOX_V, row, self.BOX_V))
        else:
            lines.append(self._line(self.BOX_V, "  Waiting for opportunities...", self.BOX_V))

        # Footer
        lines.append(f"{self.BOX_BL}{self.BOX_H * (self._width - 2)}{self.BOX_BR}")

        return "\n".join(lines)

    def display(self) -> None:
        """Display the board once."""
        # Clear screen and move cursor to top
        self._output.write("\033[2J\033[H")
        self._output.write(self.render())
        self._output.write("\n")
        self._output.flush()

    async def run(self, interval: float = REPORT_INTERVAL) -> None:
        """
        Run continuous display updates.

        Args:
            interval: Update interval in seconds.
        """
        self._running = True

        while self._running:
            self.display()
            await asyncio.sleep(interval)

    def start(self, interval: float = REPORT_INTERVAL) -> asyncio.Task[None]:
        """Start the reporter as a background task."""
        self._task = asyncio.create_task(self.run(interval))
        return self._task

    def stop(self) -> None:
        """Stop the reporter."""
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None

    def print_summary(self) -> None:
        """Print a final summary."""
        feed = self._metrics.feed_stats
        stats = self._board.stats()
        uptime = self._format_uptime(self._metrics.uptime_seconds)
        handling = self._metrics.get_latency_stats("message_handling")

        print("\n" + "=" * 50, file=self._output)
        print("  SESSION SUMMARY", file=self._output)
        print("=" * 50, file=self._output)
        print(f"  Uptime: {uptime}", file=self._output)
        print(f"  Connection attempts: {feed.connection_attempts:,}", file=self._output)
        print(file=self._output)
        print("  FEED:", file=self._output)
        print(f"    Messages:   {feed.messages_received:,}", file=self._output)
        print(f"    Dropped:    {feed.decode_errors:,}", file=self._output)
        print(f"    Upserts:    {feed.opportunities_upserted:,}", file=self._output)
        if handling.count:
            print(f"    Handling:   {handling.avg_us:.0f}μs avg", file=self._output)
        print(file=self._output)
        print("  ALERTS:", file=self._output)
        print(f"    High profit: {feed.alerts_high_profit:,}", file=self._output)
        print(f"    Standard:    {feed.alerts_standard:,}", file=self._output)
        print(file=self._output)
        print("  BOARD:", file=self._output)
        print(f"    Opportunities: {stats.total}", file=self._output)
        print(f"    Best profit:   {stats.best_profit:.2f}%", file=self._output)
        print("=" * 50, file=self._output)
