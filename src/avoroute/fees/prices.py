"""Native token USD prices.

Prices come from the Instadapp price API, which lists the native token
under the 0xEeee... placeholder address.
"""

import logging
from decimal import Decimal
from typing import Optional

import httpx

from avoroute.errors import PriceUnavailableError

logger = logging.getLogger(__name__)

NATIVE_TOKEN_ADDRESS = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"


class NativeTokenPriceFeed:
    """Point-in-time USD price of a chain's native token."""

    def __init__(
        self,
        base_url: str = "https://prices.instadapp.io",
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def price(self, chain_id: int) -> Decimal:
        """Get the native token price in USD.

        Raises:
            PriceUnavailableError: request failed or the price is missing
        """
        url = f"{self.base_url}/{int(chain_id)}/tokens"
        try:
            response = await self._client.get(url, params={"addresses": NATIVE_TOKEN_ADDRESS})
        except httpx.HTTPError as e:
            raise PriceUnavailableError(f"Price request for chain {chain_id} failed: {e}") from e

        if response.status_code != 200:
            raise PriceUnavailableError(
                f"Price API error for chain {chain_id}: {response.status_code} - {response.text}"
            )

        try:
            price = Decimal(str(response.json()[0]["price"]))
        except (ValueError, IndexError, KeyError, TypeError, ArithmeticError) as e:
            raise PriceUnavailableError(f"No native token price for chain {chain_id}") from e

        if not price.is_finite() or price <= 0:
            raise PriceUnavailableError(f"Invalid native token price for chain {chain_id}: {price}")
        return price

    async def close(self) -> None:
        await self._client.aclose()
