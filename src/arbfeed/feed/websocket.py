"""
WebSocket connection manager for the opportunity stream.

Owns the duplex connection to the feed endpoint with:
- An explicit Disconnected/Connecting/Connected state machine
- A single cancellable reconnect timer
- Decoding of inbound units at the boundary
- Optional backoff growth and attempt cap
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, Protocol

import aiohttp

from arbfeed.config.constants import (
    DEFAULT_RECONNECT_INTERVAL,
    MAX_RECONNECT_DELAY,
    RECONNECT_MULTIPLIER,
    WS_CLOSE_TIMEOUT,
    WS_MAX_MESSAGE_SIZE,
    WS_PING_INTERVAL,
)
from arbfeed.core.event_bus import EventBus, EventType
from arbfeed.core.exceptions import DecodeError, TransportError
from arbfeed.core.types import ConnectionState
from arbfeed.feed.decoder import decode_message
from arbfeed.telemetry.metrics import MetricsCollector


logger = logging.getLogger(__name__)


class WebSocketTransport(Protocol):
    """The subset of aiohttp.ClientWebSocketResponse the manager relies on."""

    @property
    def closed(self) -> bool:
        """Check if the transport is closed."""
        ...

    def __aiter__(self) -> AsyncIterator[aiohttp.WSMessage]:
        """Iterate inbound frames until the peer closes."""
        ...

    async def send_str(self, data: str) -> None:
        """Send a text frame."""
        ...

    async def close(self) -> Any:
        """Close the transport."""
        ...


# Type aliases
Connector = Callable[[str], Awaitable[WebSocketTransport]]


class AiohttpConnector:
    """
    Opens websocket connections on a lazily created aiohttp session.

    Network failures surface as TransportError.
    """

    def __init__(
        self,
        heartbeat: float = WS_PING_INTERVAL,
        max_msg_size: int = WS_MAX_MESSAGE_SIZE,
    ) -> None:
        """
        Initialize connector.

        Args:
            heartbeat: Ping interval in seconds.
            max_msg_size: Largest accepted frame in bytes.
        """
        self._heartbeat = heartbeat
        self._max_msg_size = max_msg_size
        self._session: aiohttp.ClientSession | None = None

    async def __call__(self, url: str) -> WebSocketTransport:
        """Open a websocket connection to `url`."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()

        try:
            return await self._session.ws_connect(
                url,
                heartbeat=self._heartbeat,
                max_msg_size=self._max_msg_size,
            )
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
            raise TransportError(f"Connection to {url} failed: {e}") from e

    async def close(self) -> None:
        """Close the underlying session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None


class ConnectionManager:
    """
    Manages the lifecycle of the feed connection.

    State transitions and decoded messages are published on the event bus
    as STATE_CHANGED and MESSAGE_RECEIVED. After a drop the manager waits
    `reconnect_interval` (grown by `reconnect_multiplier` per consecutive
    failure, capped at `max_reconnect_delay`) and tries again, until
    `close()` is called or `max_reconnect_attempts` consecutive attempts
    have failed.
    """

    def __init__(
        self,
        url: str,
        bus: EventBus,
        connector: Connector | None = None,
        reconnect_interval: float = DEFAULT_RECONNECT_INTERVAL,
        reconnect_multiplier: float = RECONNECT_MULTIPLIER,
        max_reconnect_delay: float = MAX_RECONNECT_DELAY,
        max_reconnect_attempts: int | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        """
        Initialize connection manager.

        Args:
            url: WebSocket endpoint.
            bus: Event bus receiving state changes and messages.
            connector: Coroutine opening a transport (default: aiohttp).
            reconnect_interval: Base delay before reconnecting (seconds).
            reconnect_multiplier: Delay growth per consecutive failure.
            max_reconnect_delay: Upper bound for the delay (seconds).
            max_reconnect_attempts: Consecutive failures before giving up.
            metrics: Optional metrics collector.
        """
        self._url = url
        self._bus = bus
        self._owned_connector = AiohttpConnector() if connector is None else None
        self._connector: Connector = connector or self._owned_connector  # type: ignore[assignment]
        self._reconnect_interval = reconnect_interval
        self._reconnect_multiplier = reconnect_multiplier
        self._max_reconnect_delay = max_reconnect_delay
        self._max_reconnect_attempts = max_reconnect_attempts
        self._metrics = metrics

        self._state = ConnectionState.DISCONNECTED
        self._transport: WebSocketTransport | None = None
        self._task: asyncio.Task[None] | None = None
        self._reconnect_handle: asyncio.TimerHandle | None = None
        self._closed = True
        self._closing = False
        self._failures = 0
        self._message_count = 0
        self._decode_error_count = 0

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def url(self) -> str:
        """Get the endpoint URL."""
        return self._url

    @property
    def state(self) -> ConnectionState:
        """Get current connection state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """Check if the stream is live."""
        return self._state == ConnectionState.CONNECTED

    @property
    def reconnect_pending(self) -> bool:
        """Check if a reconnect timer is outstanding."""
        return self._reconnect_handle is not None

    @property
    def failure_count(self) -> int:
        """Get consecutive failed connection attempts."""
        return self._failures

    @property
    def message_count(self) -> int:
        """Get total frames received."""
        return self._message_count

    @property
    def decode_error_count(self) -> int:
        """Get number of dropped malformed units."""
        return self._decode_error_count

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def open(self) -> None:
        """
        Start connecting.

        Must be called from a running event loop. Re-enables reconnection
        after a previous `close()`. No-op while connecting or connected.
        Called during an in-flight `close()`, the attempt starts once the
        teardown has finished.
        """
        self._closed = False

        if self._closing or self._state != ConnectionState.DISCONNECTED:
            return

        self._cancel_reconnect()
        self._failures = 0
        self._begin_attempt()

    async def close(self) -> None:
        """Tear down the connection and suppress any pending reconnection."""
        self._closed = True
        self._closing = True
        self._cancel_reconnect()

        try:
            task = self._task
            self._task = None
            if task and not task.done() and task is not asyncio.current_task():
                task.cancel()
                try:
                    await asyncio.wait_for(task, timeout=WS_CLOSE_TIMEOUT)
                except (TimeoutError, asyncio.CancelledError):
                    pass

            transport = self._transport
            self._transport = None
            if transport is not None and not transport.closed:
                await transport.close()

            self._set_state(ConnectionState.DISCONNECTED)

            if self._owned_connector is not None:
                await self._owned_connector.close()
        finally:
            self._closing = False

        # open() was called while tearing down
        if not self._closed:
            logger.info("Reopening after close")
            self._failures = 0
            self._begin_attempt()

    async def send(self, data: str) -> bool:
        """
        Send a text frame.

        Returns:
            False if the stream is not connected.
        """
        if self._state != ConnectionState.CONNECTED or self._transport is None:
            return False

        await self._transport.send_str(data)
        return True

    def next_delay(self) -> float:
        """Delay the next reconnect timer would use."""
        delay = self._reconnect_interval * self._reconnect_multiplier**self._failures
        return min(delay, self._max_reconnect_delay)

    # =========================================================================
    # State Machine
    # =========================================================================

    def _set_state(self, state: ConnectionState) -> None:
        """Transition and notify subscribers."""
        if state == self._state:
            return

        previous = self._state
        self._state = state
        logger.info(f"Connection {previous.value} -> {state.value}")
        self._bus.emit(EventType.STATE_CHANGED, state, source="connection")

    def _begin_attempt(self) -> None:
        """Enter Connecting and start the connection task."""
        self._set_state(ConnectionState.CONNECTING)
        self._increment("connection_attempts")
        self._task = asyncio.get_running_loop().create_task(self._run())

    def _on_transport_closed(self, failed: bool) -> None:
        """Enter Disconnected and arm the reconnect timer unless closed."""
        if failed:
            self._failures += 1

        self._set_state(ConnectionState.DISCONNECTED)

        if not self._closed:
            self._schedule_reconnect()

    def _schedule_reconnect(self) -> None:
        """Arm the reconnect timer (at most one outstanding)."""
        if self._reconnect_handle is not None:
            return

        if (
            self._max_reconnect_attempts is not None
            and self._failures >= self._max_reconnect_attempts
        ):
            logger.error(
                f"Giving up after {self._failures} failed attempts; call open() to retry"
            )
            return

        delay = self.next_delay()
        logger.info(f"Reconnecting in {delay:.1f}s")
        self._reconnect_handle = asyncio.get_running_loop().call_later(
            delay, self._on_reconnect_timer
        )
        self._increment("reconnects_scheduled")

    def _on_reconnect_timer(self) -> None:
        """Reconnect timer fired."""
        self._reconnect_handle = None

        if self._closed or self._state != ConnectionState.DISCONNECTED:
            return

        logger.info("Attempting to reconnect...")
        self._begin_attempt()

    def _cancel_reconnect(self) -> None:
        """Cancel the pending reconnect timer, if any."""
        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

    # =========================================================================
    # Connection Task
    # =========================================================================

    async def _run(self) -> None:
        """Connect, then pump frames until the transport ends."""
        try:
            transport = await self._connector(self._url)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Connection failed: {e}")
            self._task = None
            self._on_transport_closed(failed=True)
            return

        self._transport = transport
        self._failures = 0
        self._set_state(ConnectionState.CONNECTED)

        try:
            async for msg in transport:
                if not self._handle_frame(msg):
                    break
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Error in message loop: {e}")

        self._transport = None
        self._task = None
        if not transport.closed:
            try:
                await transport.close()
            except Exception as e:
                logger.warning(f"Error closing transport: {e}")

        logger.warning("Connection closed")
        self._on_transport_closed(failed=False)

    def _handle_frame(self, msg: aiohttp.WSMessage) -> bool:
        """
        Process one inbound frame.

        Args:
            msg: WebSocket frame.

        Returns:
            False if the connection should be closed.
        """
        if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
            self._message_count += 1
            self._increment("messages_received")

            try:
                message = decode_message(msg.data)
            except DecodeError as e:
                self._decode_error_count += 1
                self._increment("decode_errors")
                logger.warning(f"Dropping malformed message: {e}")
                return True

            self._bus.emit(EventType.MESSAGE_RECEIVED, message, source="connection")
            return True

        if msg.type == aiohttp.WSMsgType.ERROR:
            logger.error(f"Transport error: {msg.data}")
            return False

        if msg.type in (
            aiohttp.WSMsgType.CLOSE,
            aiohttp.WSMsgType.CLOSING,
            aiohttp.WSMsgType.CLOSED,
        ):
            return False

        return True

    def _increment(self, name: str) -> None:
        """Bump a metrics counter when a collector is attached."""
        if self._metrics is not None:
            self._metrics.increment_counter(name)
