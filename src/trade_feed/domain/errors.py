"""Exception hierarchy for feed errors.

All feed errors inherit from FeedError. None of these escape the public
adapter boundary: they are raised internally, logged, and collapsed to a
boolean, ``None`` or fallback result by the caller.

Error categories:
- ParseError: Inbound frame could not be decoded
- ProtocolError: Exchange reported an error in a frame
- TradeValidationError: A single wire trade had the wrong shape
- CatalogFetchError: The instrument listing could not be fetched
- ConfigurationError: Invalid configuration
"""

from __future__ import annotations

from typing import Any


class FeedError(Exception):
    """Base exception for all feed errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize with message and optional context.

        Args:
            message: Human-readable error description
            context: Additional structured data for logging/debugging
        """
        super().__init__(message)
        self.context = context or {}


class ParseError(FeedError):
    """Inbound frame payload is malformed.

    Raised when a frame is not valid JSON or is not a JSON object.
    The owning connection stays open.
    """

    def __init__(
        self,
        message: str,
        raw: str | bytes | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the offending raw frame.

        Args:
            message: Human-readable error description
            raw: The raw frame, truncated for logging
            context: Additional structured data
        """
        super().__init__(message, context)
        self.raw = raw[:200] if raw is not None else None


class ProtocolError(FeedError):
    """Exchange reported an error in a frame.

    Non-fatal: the frame is reported as unhandled and the connection
    stays open.
    """

    def __init__(
        self,
        message: str,
        code: int | str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the exchange error code.

        Args:
            message: Exchange error message
            code: Exchange error code
            context: Additional structured data
        """
        super().__init__(message, context)
        self.code = code

    @classmethod
    def from_payload(cls, payload: Any) -> ProtocolError:
        """Build from the ``error`` member of an inbound frame."""
        if isinstance(payload, dict):
            return cls(
                str(payload.get("message", "unknown error")),
                code=payload.get("code"),
                context={"error": payload},
            )
        return cls(str(payload), context={"error": payload})


class TradeValidationError(FeedError):
    """A wire trade has the wrong arity or shape.

    Only the single trade is dropped; the rest of its batch is processed.
    """

    def __init__(
        self,
        message: str,
        raw: Any = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the offending wire trade.

        Args:
            message: Human-readable error description
            raw: The wire trade that failed validation
            context: Additional structured data
        """
        super().__init__(message, context)
        self.raw = raw


class CatalogFetchError(FeedError):
    """Instrument listing could not be fetched or decoded.

    The catalog resolver degrades to its fallback list.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context)
        self.url = url


class ConfigurationError(FeedError):
    """Invalid configuration.

    Raised when:
    - Configuration file is malformed
    - An exchange type has no registered adapter
    - Configuration values fail validation
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with field information.

        Args:
            message: Human-readable error description
            field: Name of the configuration field with the issue
            context: Additional structured data
        """
        super().__init__(message, context)
        self.field = field
