"""Per-connection keepalive scheduling.

Keeps one heartbeat task per connection so idle connections are not
closed by the exchange.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from trade_feed.exchange.base import Connection

logger = logging.getLogger(__name__)

DEFAULT_HEARTBEAT_INTERVAL_MS = 30000
DEFAULT_HEARTBEAT_PAYLOAD: dict[str, Any] = {"method": "public/heartbeat"}


class KeepaliveScheduler:
    """Sends a heartbeat frame on each registered connection.

    Each connection is either stopped (no task) or running (exactly one
    task). Tasks live in a side-table keyed by connection id, so the
    connection object itself carries no timer state.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[None]] = {}

    def start(
        self,
        connection: Connection,
        payload: dict[str, Any] | None = None,
        interval_ms: int = DEFAULT_HEARTBEAT_INTERVAL_MS,
    ) -> bool:
        """Start sending heartbeats on a connection.

        Must be called from within a running event loop.

        Args:
            connection: Connection to keep alive
            payload: Heartbeat frame (defaults to public/heartbeat)
            interval_ms: Milliseconds between heartbeats

        Returns:
            True if a schedule was started, False if one was already
            running for this connection
        """
        if self.is_running(connection):
            return False

        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")

        frame = json.dumps(payload if payload is not None else DEFAULT_HEARTBEAT_PAYLOAD)
        task = asyncio.get_running_loop().create_task(
            self._run(connection, frame, interval_ms / 1000),
            name=f"keepalive-{connection.id}",
        )
        self._tasks[connection.id] = task

        logger.debug(
            f"Keepalive started for connection {connection.id} every {interval_ms}ms"
        )
        return True

    def stop(self, connection: Connection) -> bool:
        """Stop heartbeats on a connection.

        Returns:
            True if a running schedule was cancelled, False if the
            connection was already stopped
        """
        task = self._tasks.pop(connection.id, None)
        if task is None:
            return False

        task.cancel()
        logger.debug(f"Keepalive stopped for connection {connection.id}")
        return True

    def stop_all(self) -> None:
        """Cancel every running schedule."""
        for task in self._tasks.values():
            task.cancel()
        self._tasks.clear()

    def is_running(self, connection: Connection) -> bool:
        """Return True if a schedule is active for the connection."""
        task = self._tasks.get(connection.id)
        return task is not None and not task.done()

    @property
    def active_count(self) -> int:
        """Return the number of running schedules."""
        return sum(1 for task in self._tasks.values() if not task.done())

    async def _run(self, connection: Connection, frame: str, interval: float) -> None:
        """Heartbeat loop; runs until cancelled."""
        while True:
            await asyncio.sleep(interval)
            try:
                await connection.send(frame)
            except Exception as e:
                logger.warning(
                    f"Heartbeat send failed on connection {connection.id}: {e}"
                )
