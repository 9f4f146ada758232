"""WebSocket connection runner.

Owns the socket for one exchange adapter: connects, invokes the
adapter lifecycle hooks, pumps frames into ``on_message`` and
reconnects with exponential backoff.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import Counter
from collections.abc import Sequence

import websockets
from websockets.asyncio.client import ClientConnection

from trade_feed.domain.trade import Trade
from trade_feed.exchange.adapter import ExchangeAdapter

logger = logging.getLogger(__name__)


class WebSocketConnection:
    """Connection handle wrapping a websockets client connection."""

    def __init__(self, ws: ClientConnection, connection_id: str | None = None) -> None:
        self.id = connection_id or uuid.uuid4().hex[:8]
        self._ws = ws

    async def send(self, data: str) -> None:
        """Send one text frame."""
        logger.debug(f"Sending on {self.id}: {data}")
        await self._ws.send(data)


class LoggingTradeSink:
    """Trade handler that logs batches and keeps per-pair counts.

    Stands in for the aggregator when running the feed standalone.
    """

    def __init__(self) -> None:
        self.counts: Counter[str] = Counter()
        self.last_trade: Trade | None = None

    def __call__(self, connection_id: str, trades: Sequence[Trade]) -> None:
        for trade in trades:
            self.counts[trade.pair] += 1
            logger.info(
                f"{trade.exchange} {trade.pair} {trade.side.value} "
                f"{trade.size} @ {trade.price} ({connection_id})"
            )
        if trades:
            self.last_trade = trades[-1]

    @property
    def total(self) -> int:
        """Return the number of trades received."""
        return sum(self.counts.values())


class FeedRunner:
    """Runs one adapter over a single WebSocket connection.

    Features:
    - Automatic reconnection with exponential backoff
    - Resubscribes the configured pairs on every connect
    - Calls the adapter's created/removed hooks around each connection
    """

    def __init__(
        self,
        adapter: ExchangeAdapter,
        pairs: Sequence[str],
        reconnect_delay: float = 1.0,
        max_reconnect_delay: float = 60.0,
    ) -> None:
        """Initialize the runner.

        Args:
            adapter: Adapter handling protocol and normalization
            pairs: Pairs to subscribe on each connection
            reconnect_delay: Initial reconnect delay in seconds
            max_reconnect_delay: Upper bound on the reconnect delay
        """
        self._adapter = adapter
        self._pairs = list(pairs)
        self._reconnect_delay = reconnect_delay
        self._max_reconnect_delay = max_reconnect_delay
        self._reconnect_attempts = 0
        self._should_run = False
        self._connection: WebSocketConnection | None = None
        self._ws: ClientConnection | None = None

    @property
    def is_connected(self) -> bool:
        """Return True while a connection is open."""
        return self._connection is not None

    async def run(self) -> None:
        """Connect and process frames until ``stop`` is called."""
        self._should_run = True

        while self._should_run:
            try:
                await self._run_once()
                self._reconnect_attempts = 0
            except asyncio.CancelledError:
                raise
            except (OSError, websockets.WebSocketException) as e:
                logger.warning(f"[{self._adapter.id}] WebSocket connection lost: {e}")

            if self._should_run:
                await self._backoff()

    async def stop(self) -> None:
        """Stop running and close the current connection."""
        self._should_run = False
        if self._ws is not None:
            await self._ws.close()

    async def _run_once(self) -> None:
        """Open one connection and pump it until it closes."""
        url = await self._adapter.get_url()

        async with websockets.connect(url, ping_interval=None) as ws:
            self._ws = ws
            connection = WebSocketConnection(ws)
            self._connection = connection
            logger.info(f"[{self._adapter.id}] Connected to {url} as {connection.id}")

            self._adapter.on_api_created(connection)
            try:
                for pair in self._pairs:
                    await self._adapter.subscribe(connection, pair)

                async for raw in ws:
                    self._adapter.on_message(raw, connection)
            finally:
                self._adapter.on_api_removed(connection)
                self._connection = None
                self._ws = None
                logger.info(f"[{self._adapter.id}] Connection {connection.id} closed")

    async def _backoff(self) -> None:
        """Sleep before the next reconnection attempt."""
        self._reconnect_attempts += 1
        delay = min(
            self._reconnect_delay * (2 ** (self._reconnect_attempts - 1)),
            self._max_reconnect_delay,
        )

        logger.info(
            f"Scheduling reconnect in {delay:.1f}s "
            f"(attempt {self._reconnect_attempts})"
        )
        await asyncio.sleep(delay)
