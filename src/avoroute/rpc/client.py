"""JSON-RPC client for EVM chains.

One client per chain, kept for the lifetime of the process and reused by
every request. Calls are independent and never mutate client state.
"""

import logging
from typing import Any, Optional

import httpx

from avoroute.chains import ChainProfile, ChainRegistry
from avoroute.errors import RpcError, RpcTransportError
from avoroute.models import FeeData

logger = logging.getLogger(__name__)


class ChainRpcClient:
    """Minimal async JSON-RPC client for one chain."""

    def __init__(
        self,
        chain: ChainProfile,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.chain = chain
        self.chain_id = chain.chain_id
        self.rpc_url = chain.rpc_url
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._request_id = 0

    async def request(self, method: str, params: Optional[list] = None) -> Any:
        """Send a JSON-RPC request and return its result.

        Raises:
            RpcTransportError: endpoint unreachable, timed out or non-200
            RpcError: JSON-RPC error response (including reverts)
        """
        self._request_id += 1
        try:
            response = await self._client.post(
                self.rpc_url,
                json={
                    "jsonrpc": "2.0",
                    "method": method,
                    "params": params or [],
                    "id": self._request_id,
                },
            )
        except httpx.HTTPError as e:
            raise RpcTransportError(
                f"{method} on chain {self.chain_id} failed: {type(e).__name__}: {e}",
                chain_id=self.chain_id,
            ) from e

        if response.status_code != 200:
            raise RpcTransportError(
                f"{method} on chain {self.chain_id} returned HTTP {response.status_code}",
                chain_id=self.chain_id,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise RpcTransportError(
                f"{method} on chain {self.chain_id} returned invalid JSON", chain_id=self.chain_id
            ) from e
        if not isinstance(data, dict):
            raise RpcError(f"{method} on chain {self.chain_id}: malformed response", chain_id=self.chain_id)
        error = data.get("error")
        if error:
            if not isinstance(error, dict):
                error = {"message": error}
            raise RpcError(
                f"{method} on chain {self.chain_id}: {error.get('message', error)}",
                chain_id=self.chain_id,
                code=error.get("code"),
            )
        if data.get("result") is None:
            raise RpcError(f"{method} on chain {self.chain_id}: missing result", chain_id=self.chain_id)
        return data["result"]

    async def eth_call(self, to: str, data: str, from_address: Optional[str] = None) -> str:
        """Execute a read-only call against the latest block."""
        tx: dict[str, str] = {"to": to, "data": data}
        if from_address:
            tx["from"] = from_address
        return await self.request("eth_call", [tx, "latest"])

    async def get_code(self, address: str) -> str:
        return await self.request("eth_getCode", [address, "latest"])

    def _quantity(self, method: str, value: Any) -> int:
        """Parse a hex quantity, raising RpcError for anything else."""
        try:
            return int(value, 16)
        except (TypeError, ValueError) as e:
            raise RpcError(
                f"{method} on chain {self.chain_id}: invalid quantity {value!r}", chain_id=self.chain_id
            ) from e

    async def get_gas_price(self) -> int:
        return self._quantity("eth_gasPrice", await self.request("eth_gasPrice"))

    async def get_max_priority_fee(self) -> int:
        return self._quantity("eth_maxPriorityFeePerGas", await self.request("eth_maxPriorityFeePerGas"))

    async def get_latest_base_fee(self) -> Optional[int]:
        block = await self.request("eth_getBlockByNumber", ["latest", False])
        if not isinstance(block, dict):
            raise RpcError(
                f"eth_getBlockByNumber on chain {self.chain_id}: malformed block", chain_id=self.chain_id
            )
        base_fee = block.get("baseFeePerGas")
        return self._quantity("eth_getBlockByNumber", base_fee) if base_fee else None

    async def get_fee_data(self) -> FeeData:
        """Fetch the raw fee market data for this chain.

        EIP-1559 chains report the latest base fee and the suggested priority
        fee; other chains report the legacy gas price.
        """
        if self.chain.supports_eip1559:
            base_fee = await self.get_latest_base_fee()
            if base_fee is not None:
                priority_fee = await self.get_max_priority_fee()
                return FeeData(
                    max_priority_fee_per_gas=priority_fee,
                    last_base_fee_per_gas=base_fee,
                )
        return FeeData(gas_price=await self.get_gas_price())

    async def close(self) -> None:
        await self._client.aclose()


class RpcPool:
    """Long-lived RPC clients for every chain in the registry."""

    def __init__(self, registry: ChainRegistry, timeout: float = 10.0):
        self._clients = {
            int(chain.chain_id): ChainRpcClient(chain, timeout=timeout)
            for chain in registry.get_all_chains()
        }

    def get(self, chain_id: int) -> ChainRpcClient:
        try:
            return self._clients[int(chain_id)]
        except KeyError:
            raise KeyError(f"No RPC client for chain {chain_id}") from None

    async def close(self) -> None:
        for client in self._clients.values():
            await client.close()
        logger.info(f"Closed {len(self._clients)} RPC clients")
