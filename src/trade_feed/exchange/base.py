"""Exchange protocol abstractions.

Defines the connection handle the adapter writes to and the protocol
strategy interface each exchange wire format implements. The generic
adapter owns subscription bookkeeping and keepalive; protocols only
build frames and interpret inbound messages.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from pydantic.dataclasses import dataclass

from trade_feed.domain.trade import Trade

TradeHandler = Callable[[str, Sequence[Trade]], None]
"""Aggregator callback taking a connection id and a batch of trades."""


@runtime_checkable
class Connection(Protocol):
    """Connection handle owned by the connection manager.

    The adapter never opens or closes connections; it only sends frames
    and attaches scheduled work keyed by ``id``.
    """

    id: str

    async def send(self, data: str) -> None:
        """Send one text frame."""
        ...


class FrameKind(str, Enum):
    """Classification of an inbound frame."""

    ACK = "ack"
    ERROR = "error"
    TRADES = "trades"
    SNAPSHOT = "snapshot"
    IGNORED = "ignored"


@dataclass(frozen=True)
class FrameResult:
    """Outcome of classifying one inbound frame."""

    kind: FrameKind
    """What the frame was recognised as."""

    handled: bool = True
    """Value returned from the adapter's message hook."""

    pair: str | None = None
    """Pair extracted from the channel name, if any."""

    trades: tuple[Trade, ...] = ()
    """Normalized trades, invalid wire trades already dropped."""

    detail: Any = None
    """Extra payload for logging (ack result, error body)."""


class ExchangeProtocol(ABC):
    """Wire-format strategy for one exchange channel revision.

    Implementations must be free of per-connection state so that one
    instance can serve any number of connections.
    """

    @property
    @abstractmethod
    def exchange_id(self) -> str:
        """Return the exchange identity stamped on every trade."""
        ...

    @abstractmethod
    def channel_name(self, pair: str) -> str:
        """Return the subscription channel for a pair."""
        ...

    @abstractmethod
    def build_subscribe_frame(self, channel: str) -> dict[str, Any]:
        """Build the control frame subscribing to a channel."""
        ...

    @abstractmethod
    def build_unsubscribe_frame(self, channel: str) -> dict[str, Any]:
        """Build the control frame unsubscribing from a channel."""
        ...

    @abstractmethod
    def build_heartbeat_frame(self) -> dict[str, Any]:
        """Build the keepalive frame."""
        ...

    @abstractmethod
    def classify_frame(self, message: dict[str, Any]) -> FrameResult:
        """Classify one decoded inbound message.

        Args:
            message: Decoded JSON object

        Returns:
            FrameResult describing the frame and any trades it carried
        """
        ...

    @abstractmethod
    def format_trade(self, pair: str, raw: Any) -> Trade | None:
        """Normalize one wire trade, returning None if it is invalid."""
        ...

    @abstractmethod
    def parse_catalog(self, response: Any) -> list[str]:
        """Convert an instrument listing response into symbols."""
        ...
