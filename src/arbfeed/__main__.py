"""
Entry point for the feed client.

Usage:
    python -m arbfeed
    arbfeed  # if installed via pip
"""

import asyncio
import sys


def _install_uvloop() -> bool:
    """Use uvloop for the event loop when it is installed."""
    try:
        import uvloop
    except ImportError:
        return False

    uvloop.install()
    return True


def main() -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success).
    """
    from arbfeed import __version__
    from arbfeed.config.settings import get_settings
    from arbfeed.core.session import FeedSession
    from arbfeed.telemetry.logger import setup_logging
    from arbfeed.telemetry.notifier import LoggingNotifier

    # Print banner
    print(
        f"""
╔═══════════════════════════════════════════════════════════════╗
║     SPORTS ARBITRAGE FEED v{__version__:<29}      ║
║                                                               ║
║     Live opportunity board and stake calculator               ║
╚═══════════════════════════════════════════════════════════════╝
    """
    )

    # Load settings
    try:
        settings = get_settings()
    except Exception as e:
        print(f"Configuration error: {e}")
        print("\nSettings are read from the environment or a .env file, e.g.:")
        print("  FEED_WS_URL=ws://localhost:8080/ws")
        print("  FEED_API_URL=http://localhost:8080")
        return 1

    uvloop_enabled = _install_uvloop() if settings.use_uvloop else False

    # Print configuration summary
    print("Configuration:")
    print(f"  Stream:         {settings.feed_ws_url}")
    print(f"  Snapshot API:   {settings.feed_api_url}")
    print(f"  Reconnect:      {settings.reconnect_interval:.1f}s", end="")
    if settings.uses_backoff:
        print(f" x{settings.reconnect_multiplier:g} (max {settings.max_reconnect_delay:.0f}s)")
    else:
        print(" (fixed)")
    print(f"  Board size:     {settings.opportunity_capacity}")
    print(f"  High profit:    >= {settings.high_profit_threshold:.2f}%")
    print(f"  Bankroll:       {settings.default_bankroll:,.2f}")
    print(f"  uvloop:         {'Enabled' if uvloop_enabled else 'Disabled'}")
    print()

    async def run_session() -> int:
        async_logger = setup_logging(level=settings.log_level, log_file=settings.log_file)
        session = FeedSession(
            settings,
            notifier=LoggingNotifier(),
            enable_reporter=True,
        )

        try:
            await session.run()
            return 0

        except KeyboardInterrupt:
            print("\nInterrupted by user")
            return 0

        except Exception as e:
            print(f"\nFatal error: {e}")
            import traceback

            traceback.print_exc()
            return 1

        finally:
            await session.shutdown()
            async_logger.stop()

    return asyncio.run(run_session())


if __name__ == "__main__":
    sys.exit(main())
