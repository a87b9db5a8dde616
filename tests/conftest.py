"""Pytest configuration and fixtures."""

import asyncio
import os
from decimal import Decimal
from typing import Optional, Union

import pytest
from eth_abi import encode
from eth_utils import encode_hex, function_signature_to_4byte_selector

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"
os.environ["REDIS_URL"] = ""
os.environ["PATH_PREFIX"] = ""

from avoroute.cache import InMemoryCache
from avoroute.chains import ChainProfile, ChainRegistry
from avoroute.config import Settings
from avoroute.errors import RpcError
from avoroute.models import FeeData
from avoroute.routing.finder import RouteFinder
from avoroute.rpc.abi import FORWARDER_ARG_TYPES, SIMULATION_RESULT_TYPES

EOA_ADDRESS = "0x1111111111111111111111111111111111111111"
WALLET_ADDRESS = "0x2222222222222222222222222222222222222222"

SIMULATE_SIGNATURE = f"simulateV1({','.join(FORWARDER_ARG_TYPES)})"
EXECUTE_SIGNATURE = f"executeV1({','.join(FORWARDER_ARG_TYPES)})"


def selector(signature: str) -> str:
    return encode_hex(function_signature_to_4byte_selector(signature))


def encode_return(types: list[str], values: list) -> str:
    return encode_hex(encode(types, values))


def simulation_result(
    cast_gas: int = 60_000,
    deployment_gas: int = 0,
    is_deployed: bool = True,
    success: bool = True,
    reason: str = "",
) -> str:
    return encode_return(SIMULATION_RESULT_TYPES, [cast_gas, deployment_gas, is_deployed, success, reason])


def usdc(amount: Union[int, str]) -> int:
    """Raw 6-decimal token amount."""
    return int(Decimal(str(amount)) * 10**6)


class FakeRpc:
    """In-process stand-in for ChainRpcClient keyed by function selector."""

    def __init__(self, chain: ChainProfile, fee_data: Optional[FeeData] = None):
        self.chain = chain
        self.chain_id = chain.chain_id
        self.fee_data = fee_data or FeeData(gas_price=10**10)
        self.code = "0x6080604052"
        self.fee_data_delay = 0.0
        self.handlers: dict[str, object] = {}
        self.calls: list[tuple[str, str, Optional[str]]] = []

    def on(self, signature: str, result) -> "FakeRpc":
        """Answer calls to ``signature`` with a hex result or raise an exception."""
        self.handlers[selector(signature)] = result
        return self

    def called(self, signature: str) -> list[tuple[str, str, Optional[str]]]:
        sel = selector(signature)
        return [call for call in self.calls if call[1].startswith(sel)]

    async def eth_call(self, to: str, data: str, from_address: Optional[str] = None) -> str:
        self.calls.append((to, data, from_address))
        result = self.handlers.get(data[:10])
        if result is None:
            raise RpcError(f"eth_call on chain {self.chain_id}: execution reverted", self.chain_id, 3)
        if isinstance(result, Exception):
            raise result
        return result

    async def get_code(self, address: str) -> str:
        return self.code

    async def get_fee_data(self) -> FeeData:
        if self.fee_data_delay:
            await asyncio.sleep(self.fee_data_delay)
        if isinstance(self.fee_data, Exception):
            raise self.fee_data
        return self.fee_data

    async def close(self) -> None:
        return None


def healthy_rpc(
    chain: ChainProfile,
    balance: int = 0,
    signers: int = 1,
    nonce: int = 0,
    fee_data: Optional[FeeData] = None,
) -> FakeRpc:
    """A chain where every contract answers successfully."""
    rpc = FakeRpc(chain, fee_data)
    rpc.on("balanceOf(address)", encode_return(["uint256"], [balance]))
    rpc.on("requiredSigners()", encode_return(["uint8"], [signers]))
    rpc.on("avoNonce()", encode_return(["uint256"], [nonce]))
    rpc.on(SIMULATE_SIGNATURE, simulation_result())
    rpc.on("computeAvocado(address,uint32)", encode_return(["address"], [WALLET_ADDRESS]))
    rpc.on("l1BaseFee()", encode_return(["uint256"], [30 * 10**9]))
    rpc.on("scalar()", encode_return(["uint256"], [684_000]))
    rpc.on("getL1GasUsed(bytes)", encode_return(["uint256"], [5_000]))
    rpc.on(
        "gasEstimateL1Component(address,bool,bytes)",
        encode_return(["uint64", "uint256", "uint256"], [20_000, 10**8, 10**9]),
    )
    return rpc


class FakeRpcPool:
    """RpcPool over FakeRpc clients."""

    def __init__(self, clients: dict[int, FakeRpc]):
        self.clients = {int(k): v for k, v in clients.items()}

    def get(self, chain_id: int) -> FakeRpc:
        try:
            return self.clients[int(chain_id)]
        except KeyError:
            raise KeyError(f"No RPC client for chain {chain_id}") from None

    async def close(self) -> None:
        return None


class FakePriceFeed:
    """Fixed native token prices per chain."""

    def __init__(self, prices: Optional[dict] = None, default: Decimal = Decimal("1")):
        self.prices = {int(k): v for k, v in (prices or {}).items()}
        self.default = default

    async def price(self, chain_id: int) -> Decimal:
        value = self.prices.get(int(chain_id), self.default)
        if isinstance(value, Exception):
            raise value
        return Decimal(value)

    async def close(self) -> None:
        return None


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def registry(settings) -> ChainRegistry:
    return ChainRegistry.from_settings(settings)


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def rpc_pool(registry) -> FakeRpcPool:
    """Healthy RPC for every chain with no balances."""
    return FakeRpcPool({cid: healthy_rpc(registry.require_chain(cid)) for cid in registry.chain_ids})


@pytest.fixture
def price_feed() -> FakePriceFeed:
    return FakePriceFeed()


@pytest.fixture
def route_finder(registry, rpc_pool, cache, price_feed, settings) -> RouteFinder:
    return RouteFinder(registry, rpc_pool, cache, price_feed, settings)
