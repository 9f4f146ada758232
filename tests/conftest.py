"""Pytest configuration and shared fixtures."""

import json
from collections.abc import Callable
from typing import Any

import pytest

from trade_feed.domain.trade import Trade


class FakeConnection:
    """In-memory connection recording every frame sent."""

    def __init__(self, connection_id: str = "conn-1", fail: bool = False) -> None:
        self.id = connection_id
        self.fail = fail
        self.sent: list[str] = []

    async def send(self, data: str) -> None:
        if self.fail:
            raise ConnectionError("socket closed")
        self.sent.append(data)

    @property
    def frames(self) -> list[dict[str, Any]]:
        """Return sent frames decoded from JSON."""
        return [json.loads(frame) for frame in self.sent]


class RecordingHandler:
    """Trade handler recording every emitted batch."""

    def __init__(self) -> None:
        self.batches: list[tuple[str, list[Trade]]] = []

    def __call__(self, connection_id: str, trades: list[Trade]) -> None:
        self.batches.append((connection_id, list(trades)))

    @property
    def trades(self) -> list[Trade]:
        return [trade for _, batch in self.batches for trade in batch]


@pytest.fixture
def connection() -> FakeConnection:
    """Connection that records sent frames."""
    return FakeConnection()


@pytest.fixture
def make_connection() -> Callable[..., FakeConnection]:
    """Factory for additional connections."""
    return FakeConnection


@pytest.fixture
def trade_handler() -> RecordingHandler:
    """Handler recording emitted trade batches."""
    return RecordingHandler()


@pytest.fixture
def recent_trades_frame() -> dict:
    """Sample recent_trades notification."""
    return {
        "channel_name": "recent_trades.BTC-PERPETUAL.single",
        "notification": [
            ["50000.5", "0.01", "buy", "1690000000", "BTC-PERPETUAL", True],
            ["50001", "0.2", "sell", "1690000001.5", "BTC-PERPETUAL", False],
        ],
    }


@pytest.fixture
def book_frame() -> dict:
    """Sample raw book notification carrying one trade."""
    return {
        "channel_name": "book.BTC-PERPETUAL.none.all.raw",
        "notification": {
            "trades": [["50001", "0.02", "sell", "1690000001", "false"]],
        },
    }


@pytest.fixture
def trades_push_frame() -> dict:
    """Sample legacy trades push."""
    return {
        "method": "subscription",
        "params": {
            "channel": "trades.ETH-PERPETUAL",
            "data": [
                {
                    "timestamp": 1690000002.25,
                    "price": 1850.5,
                    "amount": 1.5,
                    "direction": "buy",
                },
            ],
        },
    }


@pytest.fixture
def instruments_response() -> dict:
    """Sample instrument listing."""
    return {
        "result": [
            {
                "instrument_name": "BTC-PERPETUAL",
                "is_active": True,
                "kind": "perpetual",
                "type": "perpetual",
            },
            {
                "instrument_name": "BTC-29DEC23",
                "is_active": True,
                "kind": "future",
                "type": "future",
            },
            {
                "instrument_name": "BTC-29DEC23-40000-C",
                "is_active": True,
                "kind": "option",
                "type": "option",
            },
            {
                "instrument_name": "ETH-PERPETUAL",
                "is_active": False,
                "kind": "perpetual",
                "type": "perpetual",
            },
        ],
    }
