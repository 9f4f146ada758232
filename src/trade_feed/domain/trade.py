"""Canonical trade record.

Every exchange wire format is normalized into a Trade before it is
handed to the aggregator. Trades are immutable.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import field_validator
from pydantic.dataclasses import dataclass


class TradeSide(str, Enum):
    """Aggressor side of a trade."""

    BUY = "buy"
    SELL = "sell"

    @classmethod
    def from_wire(cls, value: Any) -> TradeSide:
        """Map a wire side/direction marker to a TradeSide.

        Only the literal string "buy" counts as a buy; any other value,
        including other casings and missing values, is a sell.
        """
        return cls.BUY if value == "buy" else cls.SELL


class TradeSource(str, Enum):
    """Wire channel a trade was read from."""

    TRADES = "trades"
    BOOK = "book"
    RECENT_TRADES = "recent_trades"


@dataclass(frozen=True)
class Trade:
    """Exchange-agnostic trade record emitted downstream.

    Timestamps are always milliseconds since the epoch, regardless of
    the unit used on the wire.
    """

    exchange: str
    pair: str
    timestamp: int
    price: float
    size: float
    side: TradeSide
    instrument_name: str | None = None
    implied_taker: bool | None = None
    source: TradeSource | None = None

    @field_validator("price", "size")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        """Ensure price and size are not negative."""
        if v < 0:
            raise ValueError("Price and size must be non-negative")
        return v

    def to_dict(self) -> dict[str, Any]:
        """Render the downstream shape, omitting unset optional fields."""
        data: dict[str, Any] = {
            "exchange": self.exchange,
            "pair": self.pair,
            "timestamp": self.timestamp,
            "price": self.price,
            "size": self.size,
            "side": self.side.value,
        }
        if self.instrument_name is not None:
            data["instrument_name"] = self.instrument_name
        if self.implied_taker is not None:
            data["implied_taker"] = self.implied_taker
        if self.source is not None:
            data["source"] = self.source.value
        return data
