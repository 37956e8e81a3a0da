"""Alert sink writing to the log and ringing the terminal bell."""

import logging
import sys
from typing import TextIO

from arbfeed.core.types import AlertIntent, AlertTier


logger = logging.getLogger(__name__)


class LoggingNotifier:
    """
    Delivers alert intents as log records.

    High-profit alerts log at WARNING so they stand out; audible alerts
    also write a BEL character to the terminal.
    """

    def __init__(self, bell: bool = True, output: TextIO | None = None) -> None:
        """
        Initialize notifier.

        Args:
            bell: Ring the terminal bell for audible alerts.
            output: Stream receiving the bell (default: stdout).
        """
        self._bell = bell
        self._output = output or sys.stdout
        self._delivered = 0

    @property
    def delivered(self) -> int:
        """Get number of alerts delivered."""
        return self._delivered

    def notify(self, alert: AlertIntent) -> None:
        """Log one alert."""
        level = logging.WARNING if alert.tier == AlertTier.HIGH_PROFIT else logging.INFO
        logger.log(level, alert.message)
        self._delivered += 1

        if self._bell and alert.is_audible:
            self._output.write("\a")
            self._output.flush()
