"""Generic exchange adapter.

Drives one exchange protocol across any number of connections. The
adapter owns subscription bookkeeping and keepalive scheduling; the
protocol only builds frames and interprets inbound messages.

No public method raises. Failures are logged and collapse to ``False``,
``None`` or the fallback catalog so the connection owner decides on
retry and reconnect policy.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from trade_feed.domain.errors import ConfigurationError, ParseError
from trade_feed.domain.trade import Trade
from trade_feed.exchange.base import (
    Connection,
    ExchangeProtocol,
    FrameKind,
    FrameResult,
    TradeHandler,
)
from trade_feed.exchange.catalog import CatalogClient
from trade_feed.exchange.keepalive import DEFAULT_HEARTBEAT_INTERVAL_MS, KeepaliveScheduler
from trade_feed.exchange.subscriptions import SubscriptionRegistry

logger = logging.getLogger(__name__)


class ExchangeAdapter:
    """Subscription lifecycle and message dispatch for one exchange.

    Lifecycle hooks, called by the connection manager:
    - ``on_api_created`` once a connection is usable (starts keepalive)
    - ``subscribe``/``unsubscribe`` per pair
    - ``on_message`` per inbound frame
    - ``on_api_removed`` when the connection is torn down

    All per-connection state lives in the registry and keepalive
    side-tables keyed by connection id.
    """

    def __init__(
        self,
        protocol: ExchangeProtocol,
        ws_url: str,
        trade_handler: TradeHandler | None = None,
        heartbeat_interval_ms: int = DEFAULT_HEARTBEAT_INTERVAL_MS,
        keepalive: KeepaliveScheduler | None = None,
        registry: SubscriptionRegistry | None = None,
        catalog: CatalogClient | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            protocol: Wire-format strategy
            ws_url: WebSocket endpoint
            trade_handler: Callback receiving (connection id, trades)
            heartbeat_interval_ms: Keepalive period
            keepalive: Optional custom keepalive scheduler
            registry: Optional custom subscription registry
            catalog: Optional catalog client for ``fetch_products``

        Raises:
            ConfigurationError: If the heartbeat interval is not positive
        """
        if heartbeat_interval_ms <= 0:
            raise ConfigurationError(
                f"Heartbeat interval must be positive, got {heartbeat_interval_ms}",
                field="heartbeat_interval_ms",
            )

        self._protocol = protocol
        self._ws_url = ws_url
        self._trade_handler = trade_handler
        self._heartbeat_interval_ms = heartbeat_interval_ms
        self._keepalive = keepalive or KeepaliveScheduler()
        self._registry = registry or SubscriptionRegistry()
        self._catalog = catalog

    @property
    def id(self) -> str:
        """Return the exchange identity."""
        return self._protocol.exchange_id

    @property
    def protocol(self) -> ExchangeProtocol:
        """Return the wire-format strategy."""
        return self._protocol

    @property
    def subscriptions(self) -> SubscriptionRegistry:
        """Return the subscription registry."""
        return self._registry

    @property
    def keepalive(self) -> KeepaliveScheduler:
        """Return the keepalive scheduler."""
        return self._keepalive

    def set_trade_handler(self, handler: TradeHandler) -> None:
        """Set the callback receiving normalized trade batches.

        Args:
            handler: Callback called with (connection id, trades)
        """
        self._trade_handler = handler

    async def get_url(self) -> str:
        """Return the WebSocket endpoint."""
        return self._ws_url

    async def subscribe(self, connection: Connection, pair: str) -> bool:
        """Subscribe a connection to a pair.

        The subscription is recorded first; the control frame is only
        sent if the pair was not already subscribed.

        Args:
            connection: Connection to subscribe on
            pair: Pair to subscribe to

        Returns:
            True if subscribed (including when already subscribed),
            False if the control frame could not be sent
        """
        channel = self._protocol.channel_name(pair)

        if not self._registry.add(connection.id, pair, channel):
            logger.debug(f"[{self.id}] {pair} already subscribed on {connection.id}")
            return True

        frame = self._protocol.build_subscribe_frame(channel)
        try:
            await connection.send(json.dumps(frame))
        except Exception as e:
            self._registry.remove(connection.id, pair)
            logger.error(f"[{self.id}] Failed to subscribe to {channel}: {e}")
            return False

        logger.info(f"[{self.id}] Subscribed to {channel} on {connection.id}")
        return True

    async def unsubscribe(self, connection: Connection, pair: str) -> bool:
        """Unsubscribe a connection from a pair.

        The control frame is only sent if the pair was subscribed.

        Args:
            connection: Connection to unsubscribe on
            pair: Pair to unsubscribe from

        Returns:
            True if the unsubscribe frame was sent, False if the pair was
            not subscribed or the frame could not be sent
        """
        channel = self._registry.remove(connection.id, pair)
        if channel is None:
            logger.debug(f"[{self.id}] {pair} not subscribed on {connection.id}")
            return False

        frame = self._protocol.build_unsubscribe_frame(channel)
        try:
            await connection.send(json.dumps(frame))
        except Exception as e:
            logger.error(f"[{self.id}] Failed to unsubscribe from {channel}: {e}")
            return False

        logger.info(f"[{self.id}] Unsubscribed from {channel} on {connection.id}")
        return True

    def on_message(self, raw_frame: str | bytes | dict[str, Any], connection: Connection) -> bool:
        """Handle one inbound frame.

        Args:
            raw_frame: Frame text, bytes or an already decoded object
            connection: Connection the frame arrived on

        Returns:
            True if the frame was recognised and handled, False on parse
            failure or an exchange-reported error
        """
        try:
            message = self._decode(raw_frame)
            result = self._protocol.classify_frame(message)
        except ParseError as e:
            logger.error(f"[{self.id}] Error parsing message: {e}")
            return False
        except Exception as e:
            logger.error(f"[{self.id}] Error handling message: {e}")
            return False

        self._dispatch(result, connection)
        return result.handled

    def on_api_created(self, connection: Connection) -> None:
        """Start keepalive for a newly usable connection."""
        try:
            self._keepalive.start(
                connection,
                self._protocol.build_heartbeat_frame(),
                self._heartbeat_interval_ms,
            )
        except RuntimeError as e:
            logger.error(f"[{self.id}] Could not start keepalive on {connection.id}: {e}")

    def on_api_removed(self, connection: Connection) -> None:
        """Stop keepalive and forget subscriptions of a closing connection."""
        self._keepalive.stop(connection)
        pairs = self._registry.clear(connection.id)
        if pairs:
            logger.info(
                f"[{self.id}] Connection {connection.id} removed with "
                f"{len(pairs)} active subscriptions"
            )

    def format_trade(self, pair: str, raw: Any) -> Trade | None:
        """Normalize one wire trade, returning None if it is invalid."""
        return self._protocol.format_trade(pair, raw)

    def format_products(self, response: Any) -> list[str]:
        """Resolve an instrument listing into a non-empty symbol list."""
        return self._protocol.parse_catalog(response)

    async def fetch_products(self) -> list[str]:
        """Fetch and resolve the exchange catalog.

        Returns:
            Non-empty symbol list; the fallback if no catalog client is
            configured or the fetch fails
        """
        if self._catalog is None:
            return self.format_products(None)
        return await self._catalog.fetch_products()

    @staticmethod
    def _decode(raw_frame: str | bytes | dict[str, Any]) -> dict[str, Any]:
        """Decode a frame into a JSON object.

        Raises:
            ParseError: If the frame is not a JSON object
        """
        if isinstance(raw_frame, dict):
            return raw_frame

        try:
            message = json.loads(raw_frame)
        except (TypeError, ValueError) as e:
            raw = raw_frame if isinstance(raw_frame, (str, bytes)) else None
            raise ParseError(f"Invalid JSON frame: {e}", raw=raw) from e

        if not isinstance(message, dict):
            raise ParseError(
                f"Expected JSON object, got {type(message).__name__}",
                raw=raw_frame,
            )
        return message

    def _dispatch(self, result: FrameResult, connection: Connection) -> None:
        """Log a classified frame and emit its trades."""
        if result.kind == FrameKind.ACK:
            logger.debug(f"[{self.id}] Subscription acknowledged: id={result.detail}")

        elif result.kind == FrameKind.ERROR:
            logger.warning(
                f"[{self.id}] Exchange error on {connection.id}: {result.detail} "
                f"(code={getattr(result.detail, 'code', None)})"
            )

        elif result.kind == FrameKind.SNAPSHOT:
            logger.debug(f"[{self.id}] Discarded snapshot on {connection.id}")

        elif result.kind == FrameKind.TRADES and result.trades:
            self._emit(connection.id, result.trades)

    def _emit(self, connection_id: str, trades: Sequence[Trade]) -> None:
        """Hand a non-empty batch to the trade handler."""
        if self._trade_handler is None:
            return

        try:
            self._trade_handler(connection_id, list(trades))
        except Exception as e:
            logger.error(f"[{self.id}] Trade handler failed: {e}")
