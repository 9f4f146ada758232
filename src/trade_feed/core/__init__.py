"""Core application configuration."""

from trade_feed.core.config import (
    ChannelRevision,
    ExchangeSettings,
    ExchangeType,
    FeedConfig,
    load_config,
)

__all__ = [
    "ChannelRevision",
    "ExchangeSettings",
    "ExchangeType",
    "FeedConfig",
    "load_config",
]
