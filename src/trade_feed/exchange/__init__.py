"""Exchange adapters for the trade feed.

This package contains the adapter driver, the protocol abstraction,
and the concrete protocol implementations for supported exchanges.
"""

from trade_feed.exchange.adapter import ExchangeAdapter
from trade_feed.exchange.base import (
    Connection,
    ExchangeProtocol,
    FrameKind,
    FrameResult,
    TradeHandler,
)
from trade_feed.exchange.catalog import CatalogClient, ProductCatalogResolver
from trade_feed.exchange.factory import create_adapter, register_adapter
from trade_feed.exchange.keepalive import KeepaliveScheduler
from trade_feed.exchange.subscriptions import SubscriptionRegistry

__all__ = [
    "CatalogClient",
    "Connection",
    "ExchangeAdapter",
    "ExchangeProtocol",
    "FrameKind",
    "FrameResult",
    "KeepaliveScheduler",
    "ProductCatalogResolver",
    "SubscriptionRegistry",
    "TradeHandler",
    "create_adapter",
    "register_adapter",
]
