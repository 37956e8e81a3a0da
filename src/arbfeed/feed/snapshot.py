"""
Async client for the opportunity snapshot endpoint.

One GET at startup seeds the board before the stream takes over:
- Single pooled aiohttp session
- orjson parsing
- Per-record validation via the shared decoder
"""

import asyncio
import logging
from types import TracebackType
from typing import Any

import aiohttp
import orjson

from arbfeed.config.constants import DEFAULT_API_URL, ENDPOINT_ARBITRAGE, SNAPSHOT_TIMEOUT
from arbfeed.core.exceptions import SnapshotError
from arbfeed.core.types import ArbitrageOpportunity
from arbfeed.feed.decoder import parse_snapshot


logger = logging.getLogger(__name__)


class SnapshotClient:
    """
    Fetches the current opportunity list.

    No retry: a failed snapshot leaves the caller to decide.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = SNAPSHOT_TIMEOUT,
    ) -> None:
        """
        Initialize the snapshot client.

        Args:
            base_url: Base HTTP URL of the feed service.
            timeout: Total request timeout in seconds.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    @property
    def url(self) -> str:
        """Get the snapshot endpoint URL."""
        return f"{self._base_url}{ENDPOINT_ARBITRAGE}"

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
        return self._session

    async def close(self) -> None:
        """Close the client session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def fetch_raw(self) -> Any:
        """
        Fetch and parse the snapshot body.

        Returns:
            Parsed JSON body.

        Raises:
            SnapshotError: On network failure, HTTP error status or
                invalid JSON.
        """
        session = await self._get_session()

        try:
            async with session.get(self.url) as response:
                body = await response.read()
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SnapshotError(f"Network error: {e}") from e

        if status >= 400:
            raise SnapshotError(f"Snapshot request failed with HTTP {status}", status=status)

        try:
            return orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise SnapshotError(f"Invalid JSON response: {e}", status=status) from e

    async def fetch_opportunities(self) -> list[ArbitrageOpportunity]:
        """
        Fetch the current opportunities in server order.

        Returns:
            Validated opportunities; malformed records are skipped.

        Raises:
            SnapshotError: If the request fails or the body is not a list.
        """
        opportunities = parse_snapshot(await self.fetch_raw())
        logger.debug(f"Fetched {len(opportunities)} opportunities from {self.url}")
        return opportunities

    async def __aenter__(self) -> "SnapshotClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
