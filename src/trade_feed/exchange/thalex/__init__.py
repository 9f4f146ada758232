"""Thalex exchange integration.

Provides the trade normalizer and the channel protocols for the
Thalex derivatives exchange WebSocket API.
"""

from trade_feed.exchange.thalex.normalizer import THALEX_EXCHANGE_ID, ThalexNormalizer
from trade_feed.exchange.thalex.protocol import (
    PROTOCOLS,
    ThalexBookProtocol,
    ThalexProtocol,
    ThalexRecentTradesProtocol,
    ThalexTradesProtocol,
    create_thalex_protocol,
)

__all__ = [
    "PROTOCOLS",
    "THALEX_EXCHANGE_ID",
    "ThalexBookProtocol",
    "ThalexNormalizer",
    "ThalexProtocol",
    "ThalexRecentTradesProtocol",
    "ThalexTradesProtocol",
    "create_thalex_protocol",
]
