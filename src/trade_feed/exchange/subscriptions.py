"""Per-connection subscription bookkeeping."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class SubscriptionRegistry:
    """Tracks which pairs each connection is subscribed to.

    State is keyed by connection id, so a single registry can back
    many connections. Each pair maps to the channel it was subscribed
    under; a channel appears at most once per connection.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[str, dict[str, str]] = {}

    def add(self, connection_id: str, pair: str, channel: str) -> bool:
        """Record a subscription.

        Args:
            connection_id: Owning connection
            pair: Pair being subscribed
            channel: Channel name derived from the pair

        Returns:
            True if recorded, False if the pair or channel was already
            subscribed on this connection
        """
        pairs = self._subscriptions.setdefault(connection_id, {})
        if pair in pairs or channel in pairs.values():
            return False

        pairs[pair] = channel
        return True

    def remove(self, connection_id: str, pair: str) -> str | None:
        """Drop a subscription.

        Returns:
            The channel the pair was subscribed under, or None if it
            was not subscribed
        """
        pairs = self._subscriptions.get(connection_id)
        if not pairs:
            return None

        channel = pairs.pop(pair, None)
        if not pairs:
            del self._subscriptions[connection_id]
        return channel

    def is_subscribed(self, connection_id: str, pair: str) -> bool:
        """Check whether a pair is subscribed on a connection."""
        return pair in self._subscriptions.get(connection_id, {})

    def pairs(self, connection_id: str) -> list[str]:
        """Return subscribed pairs in subscription order."""
        return list(self._subscriptions.get(connection_id, {}))

    def channels(self, connection_id: str) -> list[str]:
        """Return subscribed channels in subscription order."""
        return list(self._subscriptions.get(connection_id, {}).values())

    def clear(self, connection_id: str) -> list[str]:
        """Forget every subscription of a connection.

        Returns:
            The pairs that were subscribed
        """
        pairs = self._subscriptions.pop(connection_id, {})
        if pairs:
            logger.debug(
                f"Cleared {len(pairs)} subscriptions for connection {connection_id}"
            )
        return list(pairs)

    @property
    def connection_ids(self) -> list[str]:
        """Return ids of connections with at least one subscription."""
        return list(self._subscriptions)
