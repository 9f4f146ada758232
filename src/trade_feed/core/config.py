"""Configuration models for the trade feed.

Loads and validates configuration from YAML files using pydantic.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


class ExchangeType(str, Enum):
    """Supported exchanges."""

    THALEX = "thalex"


class ChannelRevision(str, Enum):
    """Subscription channel used to source trades.

    Each revision uses a different channel name and message envelope.
    """

    TRADES = "trades"
    BOOK = "book"
    RECENT_TRADES = "recent_trades"


class ExchangeSettings(BaseModel):
    """Exchange connection configuration."""

    type: ExchangeType = ExchangeType.THALEX
    channel: ChannelRevision = ChannelRevision.RECENT_TRADES

    ws_url: str = "wss://testnet.thalex.com/ws/api/v2"
    products_url: str = "https://testnet.thalex.com/api/v2/public/instruments"

    heartbeat_interval_ms: int = Field(default=30000, gt=0)
    catalog_timeout_seconds: float = Field(default=10.0, gt=0)

    # Catalog used when the instrument listing is unavailable or empty
    fallback_products: list[str] = Field(
        default_factory=lambda: ["BTC-PERPETUAL"]
    )
    # Substrings an instrument name must contain; empty disables the filter
    product_allow_list: list[str] = Field(default_factory=list)

    @field_validator("fallback_products")
    @classmethod
    def validate_fallback_not_empty(cls, v: list[str]) -> list[str]:
        """The fallback catalog must offer at least one symbol."""
        if not v:
            raise ValueError("fallback_products must not be empty")
        return v


class FeedConfig(BaseModel):
    """Root configuration for the trade feed."""

    exchange: ExchangeSettings = Field(default_factory=ExchangeSettings)
    pairs: list[str] = Field(default_factory=lambda: ["BTC-PERPETUAL"])

    # Reconnection
    reconnect_delay_seconds: float = 1.0
    max_reconnect_delay_seconds: float = 60.0

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_yaml(cls, path: str | Path) -> FeedConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            Validated FeedConfig

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValidationError: If the config is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.model_validate(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FeedConfig:
        """Load configuration from a dictionary."""
        return cls.model_validate(data)

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to a YAML file.

        Args:
            path: Path to write the configuration
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False)


def load_config(path: str | Path | None = None) -> FeedConfig:
    """Load feed configuration.

    Looks for config in the following order:
    1. Provided path argument
    2. ./config/feed.yaml
    3. ./feed.yaml
    4. Default configuration

    Args:
        path: Optional explicit path to config file

    Returns:
        Validated FeedConfig
    """
    if path:
        return FeedConfig.from_yaml(path)

    default_paths = [
        Path("./config/feed.yaml"),
        Path("./feed.yaml"),
    ]

    for default_path in default_paths:
        if default_path.exists():
            return FeedConfig.from_yaml(default_path)

    return FeedConfig()
