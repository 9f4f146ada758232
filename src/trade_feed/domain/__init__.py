"""Domain models for the trade feed.

This package contains the exchange-agnostic trade record and the
error hierarchy shared by all adapters.
"""

from trade_feed.domain.errors import (
    CatalogFetchError,
    ConfigurationError,
    FeedError,
    ParseError,
    ProtocolError,
    TradeValidationError,
)
from trade_feed.domain.trade import Trade, TradeSide, TradeSource

__all__ = [
    "CatalogFetchError",
    "ConfigurationError",
    "FeedError",
    "ParseError",
    "ProtocolError",
    "Trade",
    "TradeSide",
    "TradeSource",
    "TradeValidationError",
]
