"""Reference connection runner driving an exchange adapter."""

from trade_feed.feed.runner import FeedRunner, LoggingTradeSink, WebSocketConnection

__all__ = ["FeedRunner", "LoggingTradeSink", "WebSocketConnection"]
