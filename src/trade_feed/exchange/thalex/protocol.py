"""Thalex WebSocket protocol.

Builds JSON-RPC style control frames and classifies inbound frames.
Three channel revisions are supported; they differ in the channel a
pair is subscribed under and in the trade shape that channel carries.
Classification itself is content-driven and shared, so a frame from
any revision is understood whichever revision is configured.
"""

from __future__ import annotations

import itertools
import logging
import time
from collections.abc import Callable
from typing import Any

from trade_feed.core.config import ChannelRevision, ExchangeSettings
from trade_feed.domain.errors import ProtocolError
from trade_feed.domain.trade import Trade
from trade_feed.exchange.base import ExchangeProtocol, FrameKind, FrameResult
from trade_feed.exchange.catalog import ProductCatalogResolver
from trade_feed.exchange.keepalive import DEFAULT_HEARTBEAT_PAYLOAD
from trade_feed.exchange.thalex.normalizer import THALEX_EXCHANGE_ID, ThalexNormalizer

logger = logging.getLogger(__name__)

SUBSCRIBE_METHOD = "public/subscribe"
UNSUBSCRIBE_METHOD = "public/unsubscribe"

BOOK_PREFIX = "book."
RECENT_TRADES_PREFIX = "recent_trades."
TRADES_PREFIX = "trades."

# Control frame ids, unique for the life of the process
_request_ids = itertools.count(int(time.time() * 1000))


def next_request_id() -> int:
    """Return a fresh control frame id."""
    return next(_request_ids)


class ThalexProtocol(ExchangeProtocol):
    """Shared Thalex framing and classification.

    Subclasses pick the channel name and the trade formatter used by
    ``format_trade``.
    """

    revision: ChannelRevision

    def __init__(
        self,
        normalizer: ThalexNormalizer | None = None,
        resolver: ProductCatalogResolver | None = None,
    ) -> None:
        """Initialize the protocol.

        Args:
            normalizer: Trade normalizer (defaults to the Thalex identity)
            resolver: Catalog resolver (defaults to BTC-PERPETUAL fallback)
        """
        self._normalizer = normalizer or ThalexNormalizer()
        self._resolver = resolver or ProductCatalogResolver(["BTC-PERPETUAL"])

    @property
    def exchange_id(self) -> str:
        """Return the exchange identity."""
        return self._normalizer.exchange_id

    @property
    def normalizer(self) -> ThalexNormalizer:
        """Return the trade normalizer."""
        return self._normalizer

    def build_subscribe_frame(self, channel: str) -> dict[str, Any]:
        """Build a public/subscribe frame for one channel."""
        return {
            "method": SUBSCRIBE_METHOD,
            "params": {"channels": [channel]},
            "id": next_request_id(),
        }

    def build_unsubscribe_frame(self, channel: str) -> dict[str, Any]:
        """Build a public/unsubscribe frame for one channel."""
        return {
            "method": UNSUBSCRIBE_METHOD,
            "params": {"channels": [channel]},
            "id": next_request_id(),
        }

    def build_heartbeat_frame(self) -> dict[str, Any]:
        """Build the public/heartbeat frame."""
        return dict(DEFAULT_HEARTBEAT_PAYLOAD)

    def parse_catalog(self, response: Any) -> list[str]:
        """Resolve an instrument listing into symbols."""
        return self._resolver.format_products(response)

    def classify_frame(self, message: dict[str, Any]) -> FrameResult:
        """Classify one decoded inbound frame.

        Rules, in priority order:
        1. ``id`` with ``result == "ok"``: subscription acknowledgement
        2. ``error``: exchange error, reported as unhandled
        3. ``channel_name`` with ``notification``: market data
        4. ``method == "subscription"``: legacy trade push
        5. anything else: ignored, reported as handled
        """
        if "id" in message and message.get("result") == "ok":
            return FrameResult(kind=FrameKind.ACK, detail=message.get("id"))

        if "error" in message:
            error = ProtocolError.from_payload(message["error"])
            return FrameResult(kind=FrameKind.ERROR, handled=False, detail=error)

        if "channel_name" in message and "notification" in message:
            return self._classify_notification(message)

        if message.get("method") == "subscription":
            return self._classify_push(message)

        return FrameResult(kind=FrameKind.IGNORED)

    def _classify_notification(self, message: dict[str, Any]) -> FrameResult:
        """Dispatch a ``channel_name``/``notification`` frame."""
        channel = message["channel_name"]
        if not isinstance(channel, str):
            return FrameResult(kind=FrameKind.IGNORED)

        if channel.startswith(BOOK_PREFIX):
            return self._classify_book(channel, message)

        if channel.startswith(RECENT_TRADES_PREFIX):
            return self._classify_recent_trades(channel, message["notification"])

        return FrameResult(kind=FrameKind.IGNORED)

    def _classify_book(self, channel: str, message: dict[str, Any]) -> FrameResult:
        """Extract trades from a book notification.

        Snapshots replay state that has already traded and are dropped.
        """
        if ThalexNormalizer.normalize_bool(message.get("snapshot")):
            return FrameResult(kind=FrameKind.SNAPSHOT)

        segments = channel.split(".")
        notification = message["notification"]
        if len(segments) < 2 or not isinstance(notification, dict):
            return FrameResult(kind=FrameKind.IGNORED)

        pair = segments[1]
        return self._batch(
            pair, notification.get("trades"), self._normalizer.format_book_trade
        )

    def _classify_recent_trades(self, channel: str, notification: Any) -> FrameResult:
        """Extract trades from a recent_trades notification."""
        segments = channel.split(".")
        pair = ".".join(segments[1:-1])
        if not pair:
            return FrameResult(kind=FrameKind.IGNORED)

        return self._batch(pair, notification, self._normalizer.format_recent_trade)

    def _classify_push(self, message: dict[str, Any]) -> FrameResult:
        """Extract trades from a legacy ``trades.{pair}`` push."""
        params = message.get("params")
        if not isinstance(params, dict):
            return FrameResult(kind=FrameKind.IGNORED)

        channel = params.get("channel")
        if not isinstance(channel, str) or not channel.startswith(TRADES_PREFIX):
            return FrameResult(kind=FrameKind.IGNORED)

        pair = channel.split(".")[1]
        if not pair:
            return FrameResult(kind=FrameKind.IGNORED)

        return self._batch(pair, params.get("data"), self._normalizer.format_trade_object)

    @staticmethod
    def _batch(
        pair: str,
        raw_trades: Any,
        formatter: Callable[[str, Any], Trade | None],
    ) -> FrameResult:
        """Normalize a batch, dropping trades the formatter rejects."""
        if not isinstance(raw_trades, list):
            return FrameResult(kind=FrameKind.IGNORED, pair=pair)

        trades = [
            trade
            for trade in (formatter(pair, raw) for raw in raw_trades)
            if trade is not None
        ]

        dropped = len(raw_trades) - len(trades)
        if dropped:
            logger.debug(f"Dropped {dropped} of {len(raw_trades)} {pair} trades")

        return FrameResult(kind=FrameKind.TRADES, pair=pair, trades=tuple(trades))


class ThalexTradesProtocol(ThalexProtocol):
    """Trades pushed on ``trades.{pair}`` as objects."""

    revision = ChannelRevision.TRADES

    def channel_name(self, pair: str) -> str:
        return f"trades.{pair}"

    def format_trade(self, pair: str, raw: Any) -> Trade | None:
        return self._normalizer.format_trade_object(pair, raw)


class ThalexBookProtocol(ThalexProtocol):
    """Trades carried on raw ``book.{pair}.none.all.raw`` notifications."""

    revision = ChannelRevision.BOOK

    def channel_name(self, pair: str) -> str:
        return f"book.{pair}.none.all.raw"

    def format_trade(self, pair: str, raw: Any) -> Trade | None:
        return self._normalizer.format_book_trade(pair, raw)


class ThalexRecentTradesProtocol(ThalexProtocol):
    """Trades carried on ``recent_trades.{pair}.single`` notifications."""

    revision = ChannelRevision.RECENT_TRADES

    def channel_name(self, pair: str) -> str:
        return f"recent_trades.{pair}.single"

    def format_trade(self, pair: str, raw: Any) -> Trade | None:
        return self._normalizer.format_recent_trade(pair, raw)


PROTOCOLS: dict[ChannelRevision, type[ThalexProtocol]] = {
    ChannelRevision.TRADES: ThalexTradesProtocol,
    ChannelRevision.BOOK: ThalexBookProtocol,
    ChannelRevision.RECENT_TRADES: ThalexRecentTradesProtocol,
}


def create_thalex_protocol(settings: ExchangeSettings) -> ThalexProtocol:
    """Create the protocol for the configured channel revision.

    Args:
        settings: Exchange settings

    Returns:
        Protocol instance sharing a resolver built from the settings
    """
    resolver = ProductCatalogResolver(
        settings.fallback_products, settings.product_allow_list
    )
    protocol_cls = PROTOCOLS[settings.channel]
    return protocol_cls(ThalexNormalizer(THALEX_EXCHANGE_ID), resolver)
