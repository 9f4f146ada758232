"""Tests for the command line entry point."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from trade_feed.core.config import ChannelRevision, FeedConfig
from trade_feed.main import build_config, main, parse_args


class TestBuildConfig:
    """Tests for argument merging."""

    def test_overrides(self, tmp_path: Path) -> None:
        path = tmp_path / "feed.yaml"
        path.write_text("pairs:\n  - BTC-PERPETUAL\nexchange:\n  channel: trades\n")

        args = parse_args(
            ["--config", str(path), "--channel", "book", "-p", "ETH-PERPETUAL", "-l", "DEBUG"]
        )
        config = build_config(args)

        assert config.exchange.channel == ChannelRevision.BOOK
        assert config.pairs == ["ETH-PERPETUAL"]
        assert config.log_level == "DEBUG"

    def test_file_values_kept(self, tmp_path: Path) -> None:
        path = tmp_path / "feed.yaml"
        path.write_text("pairs:\n  - SOL-PERPETUAL\n")
        config = build_config(parse_args(["--config", str(path)]))
        assert config.pairs == ["SOL-PERPETUAL"]
        assert config.exchange.channel == ChannelRevision.RECENT_TRADES

    def test_unknown_channel_rejected(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["--channel", "ticker"])


class TestMain:
    """Tests for main()."""

    def test_dry_run(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert main(["--dry-run"]) == 0

    def test_missing_config_file(self, tmp_path: Path) -> None:
        assert main(["--config", str(tmp_path / "missing.yaml")]) == 1

    def test_list_products(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.chdir(tmp_path)
        with patch(
            "trade_feed.exchange.adapter.ExchangeAdapter.fetch_products",
            new=AsyncMock(return_value=["BTC-PERPETUAL", "ETH-PERPETUAL"]),
        ):
            assert main(["--list-products"]) == 0

        out = capsys.readouterr().out
        assert "THALEX:BTC-PERPETUAL" in out
        assert "THALEX:ETH-PERPETUAL" in out

    def test_save_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        target = tmp_path / "out" / "feed.yaml"

        assert main(["--channel", "book", "-p", "ETH-PERPETUAL", "--save-config", str(target)]) == 0

        saved = FeedConfig.from_yaml(target)
        assert saved.exchange.channel == ChannelRevision.BOOK
        assert saved.pairs == ["ETH-PERPETUAL"]
