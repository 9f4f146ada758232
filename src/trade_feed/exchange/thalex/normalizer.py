"""Thalex trade normalizer.

Converts the three Thalex trade wire shapes to canonical trades.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any

from pydantic import ValidationError

from trade_feed.domain.errors import TradeValidationError
from trade_feed.domain.trade import Trade, TradeSide, TradeSource

logger = logging.getLogger(__name__)

THALEX_EXCHANGE_ID = "THALEX"

# Tuple layouts
BOOK_TRADE_ARITY = 5  # [price, amount, direction, timestamp, implied_taker]
RECENT_TRADE_ARITY = 6  # [price, size, side, timestamp, instrument_name, implied_taker]

# Wire values below this are taken to be seconds rather than milliseconds
_MS_THRESHOLD = 1e12


class ThalexNormalizer:
    """Converts Thalex trade messages to Trade records.

    Thalex uses:
    - Numeric fields as JSON numbers or decimal strings
    - "buy"/"sell" for the aggressor side
    - Timestamps in seconds (fractional) since the epoch
    - Booleans or "true"/"false" strings for implied_taker
    """

    def __init__(self, exchange_id: str = THALEX_EXCHANGE_ID) -> None:
        """Initialize the normalizer.

        Args:
            exchange_id: Identity stamped on every trade
        """
        self.exchange_id = exchange_id

    @staticmethod
    def normalize_timestamp(value: Any, unit: str = "s") -> int:
        """Convert a wire timestamp to epoch milliseconds.

        Args:
            value: Wire timestamp (number or numeric string)
            unit: "s" for seconds, "ms" for milliseconds, "auto" to
                detect from magnitude

        Returns:
            Milliseconds since the epoch

        Raises:
            TradeValidationError: If the value is not a finite, non-negative
                number of milliseconds
        """
        if value is None or value == "":
            if unit == "auto":
                return int(time.time() * 1000)
            raise TradeValidationError("Missing timestamp", raw=value)

        ts = ThalexNormalizer._to_float(value, "timestamp")

        if unit == "auto":
            unit = "s" if abs(ts) < _MS_THRESHOLD else "ms"

        if unit == "s":
            millis = ts * 1000
        elif unit == "ms":
            millis = ts
        else:
            raise ValueError(f"Unknown timestamp unit: {unit}")

        if millis < 0:
            raise TradeValidationError(f"Negative timestamp: {value!r}", raw=value)
        if not math.isfinite(millis):
            raise TradeValidationError(f"Timestamp out of range: {value!r}", raw=value)
        return int(round(millis))

    @staticmethod
    def normalize_side(value: Any) -> TradeSide:
        """Convert a wire side/direction to TradeSide.

        Only the exact string "buy" maps to BUY.
        """
        return TradeSide.from_wire(value)

    @staticmethod
    def normalize_bool(value: Any) -> bool | None:
        """Convert a wire boolean to bool.

        Accepts JSON booleans and "true"/"false" strings. None stays None.
        """
        if value is None:
            return None
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return bool(value)

    @staticmethod
    def normalize_quantity(value: Any, field: str) -> float:
        """Convert a wire price or size to a non-negative float.

        Raises:
            TradeValidationError: If the value is missing, not finite,
                or negative
        """
        number = ThalexNormalizer._to_float(value, field)
        if number < 0:
            raise TradeValidationError(f"Negative {field}: {value!r}", raw=value)
        return number

    @staticmethod
    def _to_float(value: Any, field: str) -> float:
        """Parse a finite float from a number or numeric string."""
        if isinstance(value, bool):
            raise TradeValidationError(f"Invalid {field}: {value!r}", raw=value)
        try:
            number = float(value)
        except (TypeError, ValueError) as e:
            raise TradeValidationError(f"Invalid {field}: {value!r}", raw=value) from e

        if not math.isfinite(number):
            raise TradeValidationError(f"Non-finite {field}: {value!r}", raw=value)
        return number

    def format_trade_object(self, pair: str, trade: Any) -> Trade | None:
        """Normalize a trade pushed on the ``trades.{pair}`` channel.

        Args:
            pair: Pair taken from the channel name
            trade: Object with ``timestamp``, ``price``, ``amount`` and
                ``direction``

        Returns:
            Trade, or None if the object is malformed
        """
        if not isinstance(trade, dict):
            logger.warning(f"Dropping {pair} trade, expected object: {trade!r}")
            return None

        try:
            return Trade(
                exchange=self.exchange_id,
                pair=pair,
                timestamp=self.normalize_timestamp(trade.get("timestamp"), unit="auto"),
                price=self.normalize_quantity(trade.get("price"), "price"),
                size=self.normalize_quantity(trade.get("amount"), "amount"),
                side=self.normalize_side(trade.get("direction")),
                source=TradeSource.TRADES,
            )
        except (TradeValidationError, ValidationError) as e:
            logger.warning(f"Dropping malformed {pair} trade: {e}")
            return None

    def format_book_trade(self, pair: str, trade: Any) -> Trade | None:
        """Normalize a trade tuple from a ``book.*`` notification.

        Args:
            pair: Pair taken from the channel name
            trade: ``[price, amount, direction, timestamp, implied_taker]``

        Returns:
            Trade, or None if the tuple is malformed
        """
        if not self._has_arity(pair, trade, BOOK_TRADE_ARITY):
            return None

        price, amount, direction, timestamp, implied_taker = trade[:BOOK_TRADE_ARITY]

        try:
            return Trade(
                exchange=self.exchange_id,
                pair=pair,
                timestamp=self.normalize_timestamp(timestamp),
                price=self.normalize_quantity(price, "price"),
                size=self.normalize_quantity(amount, "amount"),
                side=self.normalize_side(direction),
                instrument_name=pair,
                implied_taker=self.normalize_bool(implied_taker),
                source=TradeSource.BOOK,
            )
        except (TradeValidationError, ValidationError) as e:
            logger.warning(f"Dropping malformed {pair} book trade: {e}")
            return None

    def format_recent_trade(self, pair: str, trade: Any) -> Trade | None:
        """Normalize a trade tuple from a ``recent_trades.*`` notification.

        Args:
            pair: Pair taken from the channel name
            trade: ``[price, size, side, timestamp, instrument_name,
                implied_taker]``

        Returns:
            Trade, or None if the tuple is malformed
        """
        if not self._has_arity(pair, trade, RECENT_TRADE_ARITY):
            return None

        price, size, side, timestamp, instrument_name, implied_taker = trade[
            :RECENT_TRADE_ARITY
        ]

        try:
            return Trade(
                exchange=self.exchange_id,
                pair=pair,
                timestamp=self.normalize_timestamp(timestamp),
                price=self.normalize_quantity(price, "price"),
                size=self.normalize_quantity(size, "size"),
                side=self.normalize_side(side),
                instrument_name=str(instrument_name) if instrument_name else pair,
                implied_taker=self.normalize_bool(implied_taker),
                source=TradeSource.RECENT_TRADES,
            )
        except (TradeValidationError, ValidationError) as e:
            logger.warning(f"Dropping malformed {pair} recent trade: {e}")
            return None

    @staticmethod
    def _has_arity(pair: str, trade: Any, arity: int) -> bool:
        """Check a wire tuple is a list of at least ``arity`` fields."""
        if not isinstance(trade, (list, tuple)):
            logger.warning(f"Dropping {pair} trade, expected array: {trade!r}")
            return False

        if len(trade) < arity:
            logger.warning(
                f"Dropping {pair} trade with {len(trade)} fields, expected {arity}"
            )
            return False

        return True
