"""Tests for keepalive scheduling."""

import asyncio
import json

import pytest

from trade_feed.exchange.keepalive import DEFAULT_HEARTBEAT_PAYLOAD, KeepaliveScheduler

HEARTBEAT = {"method": "public/heartbeat"}


class TestKeepaliveScheduler:
    """Tests for KeepaliveScheduler."""

    @pytest.mark.asyncio
    async def test_sends_heartbeats(self, connection) -> None:
        """Heartbeats are sent every interval."""
        scheduler = KeepaliveScheduler()
        assert scheduler.start(connection, HEARTBEAT, interval_ms=20)

        await asyncio.sleep(0.09)
        scheduler.stop(connection)

        assert 2 <= len(connection.sent) <= 5
        assert all(json.loads(frame) == HEARTBEAT for frame in connection.sent)

    @pytest.mark.asyncio
    async def test_start_twice_keeps_one_schedule(self, connection) -> None:
        """A second start is a no-op and does not double the rate."""
        scheduler = KeepaliveScheduler()
        assert scheduler.start(connection, HEARTBEAT, interval_ms=40)
        assert not scheduler.start(connection, HEARTBEAT, interval_ms=40)
        assert scheduler.active_count == 1

        await asyncio.sleep(0.1)
        scheduler.stop(connection)

        # two schedules would have sent four
        assert 1 <= len(connection.sent) <= 3

    @pytest.mark.asyncio
    async def test_stop_cancels(self, connection) -> None:
        """No heartbeats are sent after stop."""
        scheduler = KeepaliveScheduler()
        scheduler.start(connection, HEARTBEAT, interval_ms=20)
        assert scheduler.is_running(connection)

        assert scheduler.stop(connection)
        assert not scheduler.is_running(connection)

        await asyncio.sleep(0.06)
        assert connection.sent == []

    @pytest.mark.asyncio
    async def test_stop_idempotent(self, connection) -> None:
        """Stopping a stopped connection is harmless."""
        scheduler = KeepaliveScheduler()
        assert not scheduler.stop(connection)
        scheduler.start(connection, HEARTBEAT, interval_ms=20)
        assert scheduler.stop(connection)
        assert not scheduler.stop(connection)

    @pytest.mark.asyncio
    async def test_restart_after_stop(self, connection) -> None:
        scheduler = KeepaliveScheduler()
        scheduler.start(connection, HEARTBEAT, interval_ms=20)
        scheduler.stop(connection)
        assert scheduler.start(connection, HEARTBEAT, interval_ms=20)
        scheduler.stop_all()

    @pytest.mark.asyncio
    async def test_default_payload(self, connection) -> None:
        scheduler = KeepaliveScheduler()
        scheduler.start(connection, interval_ms=10)
        await asyncio.sleep(0.035)
        scheduler.stop(connection)

        assert connection.sent
        assert json.loads(connection.sent[0]) == DEFAULT_HEARTBEAT_PAYLOAD

    @pytest.mark.asyncio
    async def test_connections_independent(self, make_connection) -> None:
        """Each connection has its own schedule."""
        first = make_connection("c1")
        second = make_connection("c2")
        scheduler = KeepaliveScheduler()

        scheduler.start(first, HEARTBEAT, interval_ms=20)
        scheduler.start(second, HEARTBEAT, interval_ms=20)
        assert scheduler.active_count == 2

        scheduler.stop(first)
        assert not scheduler.is_running(first)
        assert scheduler.is_running(second)
        scheduler.stop_all()
        assert scheduler.active_count == 0

    @pytest.mark.asyncio
    async def test_send_failure_keeps_running(self, make_connection) -> None:
        """A failing send is logged and the schedule continues."""
        conn = make_connection("c1", fail=True)
        scheduler = KeepaliveScheduler()
        scheduler.start(conn, HEARTBEAT, interval_ms=10)

        await asyncio.sleep(0.035)
        assert scheduler.is_running(conn)
        scheduler.stop(conn)

    @pytest.mark.asyncio
    async def test_invalid_interval(self, connection) -> None:
        scheduler = KeepaliveScheduler()
        with pytest.raises(ValueError):
            scheduler.start(connection, HEARTBEAT, interval_ms=0)
        assert not scheduler.is_running(connection)

    def test_start_without_loop(self, connection) -> None:
        """Starting outside an event loop raises RuntimeError."""
        scheduler = KeepaliveScheduler()
        with pytest.raises(RuntimeError):
            scheduler.start(connection, HEARTBEAT, interval_ms=10)
        assert not scheduler.is_running(connection)
