"""Exchange adapter factory.

Provides configuration-driven adapter instantiation, allowing the
exchange and channel revision to be selected via configuration rather
than code changes.
"""

from __future__ import annotations

from collections.abc import Callable

from trade_feed.core.config import ExchangeSettings, ExchangeType
from trade_feed.domain.errors import ConfigurationError
from trade_feed.exchange.adapter import ExchangeAdapter
from trade_feed.exchange.base import TradeHandler
from trade_feed.exchange.catalog import CatalogClient, ProductCatalogResolver
from trade_feed.exchange.thalex.protocol import create_thalex_protocol

AdapterFactory = Callable[[ExchangeSettings, TradeHandler | None], ExchangeAdapter]

# Registry of adapter factories
_adapter_factories: dict[ExchangeType, AdapterFactory] = {}


def register_adapter(exchange_type: ExchangeType, factory: AdapterFactory) -> None:
    """Register an adapter factory for an exchange type.

    Args:
        exchange_type: The type of exchange
        factory: Function that creates an adapter from settings
    """
    _adapter_factories[exchange_type] = factory


def unregister_adapter(exchange_type: ExchangeType) -> None:
    """Remove a registered factory, if any."""
    _adapter_factories.pop(exchange_type, None)


def create_adapter(
    settings: ExchangeSettings,
    trade_handler: TradeHandler | None = None,
) -> ExchangeAdapter:
    """Create an exchange adapter from configuration.

    Args:
        settings: Exchange settings
        trade_handler: Callback receiving normalized trade batches

    Returns:
        Configured exchange adapter

    Raises:
        ConfigurationError: If no adapter registered for exchange type
    """
    factory = _adapter_factories.get(settings.type)
    if factory is None:
        raise ConfigurationError(
            f"No adapter registered for exchange type: {settings.type.value}",
            field="type",
        )
    return factory(settings, trade_handler)


def create_thalex_adapter(
    settings: ExchangeSettings,
    trade_handler: TradeHandler | None = None,
) -> ExchangeAdapter:
    """Build a Thalex adapter for the configured channel revision."""
    protocol = create_thalex_protocol(settings)
    catalog = CatalogClient(
        settings.products_url,
        ProductCatalogResolver(settings.fallback_products, settings.product_allow_list),
        timeout=settings.catalog_timeout_seconds,
    )
    return ExchangeAdapter(
        protocol,
        ws_url=settings.ws_url,
        trade_handler=trade_handler,
        heartbeat_interval_ms=settings.heartbeat_interval_ms,
        catalog=catalog,
    )


register_adapter(ExchangeType.THALEX, create_thalex_adapter)
