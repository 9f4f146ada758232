"""Tests for the feed error hierarchy."""

import pytest

from trade_feed.domain.errors import (
    CatalogFetchError,
    ConfigurationError,
    FeedError,
    ParseError,
    ProtocolError,
    TradeValidationError,
)


class TestFeedErrorHierarchy:
    """All feed errors share one base."""

    @pytest.mark.parametrize(
        "error",
        [
            ParseError("bad"),
            ProtocolError("bad"),
            TradeValidationError("bad"),
            CatalogFetchError("bad"),
            ConfigurationError("bad"),
        ],
    )
    def test_subclasses_feed_error(self, error: FeedError) -> None:
        """Every error is a FeedError with a context dict."""
        assert isinstance(error, FeedError)
        assert error.context == {}

    def test_context_preserved(self) -> None:
        """Context is stored on the error."""
        error = FeedError("bad", context={"pair": "BTC-PERPETUAL"})
        assert error.context["pair"] == "BTC-PERPETUAL"


class TestParseError:
    """Tests for ParseError."""

    def test_raw_is_truncated(self) -> None:
        """Long raw frames are truncated for logging."""
        error = ParseError("bad", raw="x" * 1000)
        assert error.raw is not None
        assert len(error.raw) == 200

    def test_raw_optional(self) -> None:
        """Raw frame defaults to None."""
        assert ParseError("bad").raw is None


class TestProtocolError:
    """Tests for ProtocolError."""

    def test_from_payload_object(self) -> None:
        """Code and message are read from an error object."""
        error = ProtocolError.from_payload({"code": 1, "message": "bad request"})
        assert str(error) == "bad request"
        assert error.code == 1
        assert error.context["error"] == {"code": 1, "message": "bad request"}

    def test_from_payload_string(self) -> None:
        """A bare error string becomes the message."""
        error = ProtocolError.from_payload("rate limited")
        assert str(error) == "rate limited"
        assert error.code is None

    def test_from_payload_missing_message(self) -> None:
        """An error object without message still yields a message."""
        error = ProtocolError.from_payload({"code": 7})
        assert str(error) == "unknown error"
        assert error.code == 7


class TestConfigurationError:
    """Tests for ConfigurationError."""

    def test_field(self) -> None:
        """The offending field is recorded."""
        error = ConfigurationError("bad type", field="type")
        assert error.field == "type"
