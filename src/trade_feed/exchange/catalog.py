"""Product catalog resolution.

Turns an exchange instrument listing into the list of symbols offered
for subscription. The resolved catalog is never empty: when the listing
is missing, unreachable or filters down to nothing, the configured
fallback list is returned instead.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from trade_feed.domain.errors import CatalogFetchError

logger = logging.getLogger(__name__)


class ProductCatalogResolver:
    """Filters an instrument listing down to tradable symbols.

    An instrument is kept when it is active and is either a future or
    a perpetual. If an allow-list is configured, the instrument name
    must also contain one of its entries.
    """

    def __init__(
        self,
        fallback: Sequence[str],
        allow_list: Sequence[str] | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            fallback: Symbols returned when nothing usable is listed
            allow_list: Optional name fragments an instrument must contain

        Raises:
            ValueError: If the fallback list is empty
        """
        if not fallback:
            raise ValueError("Fallback catalog must not be empty")

        self._fallback = tuple(fallback)
        self._allow_list = tuple(allow_list or ())

    @property
    def fallback(self) -> list[str]:
        """Return a copy of the fallback catalog."""
        return list(self._fallback)

    def format_products(self, response: Any) -> list[str]:
        """Resolve a listing response into symbols.

        Args:
            response: Decoded listing body, expected to look like
                ``{"result": [{"instrument_name": ..., "is_active": ...,
                "kind": ..., "type": ...}, ...]}``

        Returns:
            Ordered, non-empty list of instrument names
        """
        if not response or not isinstance(response, dict):
            return self.fallback

        instruments = response.get("result")
        if not instruments or not isinstance(instruments, list):
            return self.fallback

        products = [
            instrument["instrument_name"]
            for instrument in instruments
            if self._is_tradable(instrument)
        ]

        if not products:
            logger.info("Instrument listing had no tradable products, using fallback")
            return self.fallback

        return products

    def _is_tradable(self, instrument: Any) -> bool:
        """Check one listing entry against the filter."""
        if not isinstance(instrument, dict):
            return False

        name = instrument.get("instrument_name")
        if not isinstance(name, str) or not name:
            return False

        if instrument.get("is_active") is not True:
            return False

        if instrument.get("kind") != "future" and instrument.get("type") != "perpetual":
            return False

        if self._allow_list:
            return any(fragment in name for fragment in self._allow_list)

        return True


class CatalogClient:
    """Fetches the instrument listing over HTTP.

    Any transport, status or decoding failure degrades to the resolver's
    fallback catalog; ``fetch_products`` never raises.
    """

    def __init__(
        self,
        url: str,
        resolver: ProductCatalogResolver,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            url: Instrument listing endpoint
            resolver: Resolver applied to the decoded response
            timeout: Request timeout in seconds
            client: Optional shared HTTP client (not closed by this object)
        """
        self._url = url
        self._resolver = resolver
        self._timeout = timeout
        self._client = client

    @property
    def url(self) -> str:
        """Return the listing endpoint."""
        return self._url

    async def fetch_listing(self) -> dict[str, Any]:
        """Fetch and decode the raw listing.

        Returns:
            Decoded JSON body

        Raises:
            CatalogFetchError: If the request or decoding fails
        """
        try:
            if self._client is not None:
                response = await self._client.get(self._url, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(self._url)
            response.raise_for_status()
            body: dict[str, Any] = response.json()
            return body

        except httpx.HTTPStatusError as e:
            raise CatalogFetchError(
                f"Catalog request returned {e.response.status_code}",
                url=self._url,
            ) from e

        except httpx.RequestError as e:
            raise CatalogFetchError(
                f"Catalog request failed: {e}", url=self._url
            ) from e

        except httpx.InvalidURL as e:
            raise CatalogFetchError(
                f"Catalog URL is invalid: {e}", url=self._url
            ) from e

        except ValueError as e:
            raise CatalogFetchError(
                f"Catalog response is not valid JSON: {e}", url=self._url
            ) from e

    async def fetch_products(self) -> list[str]:
        """Fetch the listing and resolve it into symbols.

        Returns:
            Non-empty list of symbols, the fallback on any failure
        """
        try:
            listing = await self.fetch_listing()
        except CatalogFetchError as e:
            logger.warning(f"{e}; using fallback catalog")
            return self._resolver.fallback

        products = self._resolver.format_products(listing)
        logger.info(f"Resolved {len(products)} products from {self._url}")
        return products
