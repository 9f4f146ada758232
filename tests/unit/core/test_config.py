"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from trade_feed.core.config import (
    ChannelRevision,
    ExchangeSettings,
    ExchangeType,
    FeedConfig,
    load_config,
)


class TestExchangeSettings:
    """Tests for ExchangeSettings."""

    def test_defaults(self) -> None:
        """Defaults target Thalex recent trades with a 30s heartbeat."""
        settings = ExchangeSettings()
        assert settings.type == ExchangeType.THALEX
        assert settings.channel == ChannelRevision.RECENT_TRADES
        assert settings.heartbeat_interval_ms == 30000
        assert settings.fallback_products == ["BTC-PERPETUAL"]
        assert settings.product_allow_list == []

    def test_empty_fallback_rejected(self) -> None:
        """The fallback catalog must not be empty."""
        with pytest.raises(ValidationError):
            ExchangeSettings(fallback_products=[])

    def test_non_positive_heartbeat_rejected(self) -> None:
        """Heartbeat interval must be positive."""
        with pytest.raises(ValidationError):
            ExchangeSettings(heartbeat_interval_ms=0)

    def test_channel_from_string(self) -> None:
        """Channel revision is parsed from its name."""
        settings = ExchangeSettings.model_validate({"channel": "book"})
        assert settings.channel == ChannelRevision.BOOK

    def test_unknown_channel_rejected(self) -> None:
        """Unknown channel revisions fail validation."""
        with pytest.raises(ValidationError):
            ExchangeSettings.model_validate({"channel": "ticker"})


class TestFeedConfig:
    """Tests for FeedConfig."""

    def test_defaults(self) -> None:
        """Default config subscribes BTC-PERPETUAL."""
        config = FeedConfig()
        assert config.pairs == ["BTC-PERPETUAL"]
        assert config.log_level == "INFO"
        assert config.log_file is None

    def test_from_dict(self) -> None:
        """Nested settings are validated from a dict."""
        config = FeedConfig.from_dict(
            {
                "exchange": {"channel": "trades", "heartbeat_interval_ms": 5000},
                "pairs": ["ETH-PERPETUAL"],
            }
        )
        assert config.exchange.channel == ChannelRevision.TRADES
        assert config.exchange.heartbeat_interval_ms == 5000
        assert config.pairs == ["ETH-PERPETUAL"]

    def test_yaml_round_trip(self, tmp_path: Path) -> None:
        """Config written to YAML loads back identically."""
        config = FeedConfig.from_dict(
            {"exchange": {"channel": "book"}, "pairs": ["BTC-PERPETUAL", "ETH-PERPETUAL"]}
        )
        path = tmp_path / "nested" / "feed.yaml"
        config.to_yaml(path)

        loaded = FeedConfig.from_yaml(path)
        assert loaded == config

    def test_from_yaml_missing_file(self, tmp_path: Path) -> None:
        """Missing files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            FeedConfig.from_yaml(tmp_path / "missing.yaml")

    def test_from_yaml_empty_file(self, tmp_path: Path) -> None:
        """An empty file yields the defaults."""
        path = tmp_path / "feed.yaml"
        path.write_text("")
        assert FeedConfig.from_yaml(path) == FeedConfig()


class TestLoadConfig:
    """Tests for load_config."""

    def test_explicit_path(self, tmp_path: Path) -> None:
        """An explicit path is loaded."""
        path = tmp_path / "custom.yaml"
        path.write_text("pairs:\n  - ETH-PERPETUAL\n")
        assert load_config(path).pairs == ["ETH-PERPETUAL"]

    def test_default_location(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """./config/feed.yaml is picked up when present."""
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "feed.yaml").write_text(
            "exchange:\n  channel: trades\n"
        )
        monkeypatch.chdir(tmp_path)
        assert load_config().exchange.channel == ChannelRevision.TRADES

    def test_no_file_returns_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without any file the defaults are used."""
        monkeypatch.chdir(tmp_path)
        assert load_config() == FeedConfig()
