"""Telemetry module for logging, metrics, and reporting."""

from arbfeed.telemetry.logger import AsyncLogger, setup_logging
from arbfeed.telemetry.metrics import MetricsCollector
from arbfeed.telemetry.notifier import LoggingNotifier
from arbfeed.telemetry.reporter import CLIReporter


__all__ = [
    "AsyncLogger",
    "CLIReporter",
    "LoggingNotifier",
    "MetricsCollector",
    "setup_logging",
]
