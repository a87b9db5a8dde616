"""Chain and token registry for every network the wallet is sourced from.

The Avocado wallet lives at the same address on all of these chains, so the
registry only needs per-chain fee behaviour and the stablecoin contracts.

Supports 5 chains:
- Ethereum (EIP-1559 pricing)
- Polygon, Avalanche (legacy gas price)
- Arbitrum (L1 gas folded into the gas limit)
- Optimism (L1 data fee from the gas price oracle)
"""

from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Mapping, Optional

from avoroute.config import Settings


class ChainId(IntEnum):
    """Supported EVM chain ids."""

    ETHEREUM = 1
    POLYGON = 137
    OPTIMISM = 10
    AVALANCHE = 43114
    ARBITRUM = 42161


class TokenSymbol(str, Enum):
    """Supported stablecoins."""

    USDC = "USDC"
    USDT = "USDT"


@dataclass(frozen=True)
class ChainProfile:
    """Static fee behaviour of a chain."""

    # Required fields (no defaults) - must come first
    chain_id: int
    name: str
    native_symbol: str
    gas_price_multiplier: int  # basis-hundreds, 110 = +10%

    # Optional fields (with defaults)
    supports_eip1559: bool = False
    has_l1_surcharge: bool = False  # L1 data fee read from a gas price oracle
    l1_gas_in_limit: bool = False  # L1 cost reported as extra L2 gas
    unreliable_gas_estimation: bool = False
    l1_fee_divisor: int = 10**6
    rpc_url: str = ""


@dataclass(frozen=True)
class TokenProfile:
    """A stablecoin contract on one chain."""

    chain_id: int
    symbol: str
    contract_address: str
    decimals: int


# ======================
# Chain Configurations
# ======================

CHAINS: Mapping[int, ChainProfile] = MappingProxyType({
    ChainId.ETHEREUM: ChainProfile(
        chain_id=1,
        name="Ethereum Mainnet",
        native_symbol="ETH",
        gas_price_multiplier=110,
        supports_eip1559=True,
    ),
    ChainId.POLYGON: ChainProfile(
        chain_id=137,
        name="Polgon POS",
        native_symbol="MATIC",
        gas_price_multiplier=120,
    ),
    ChainId.ARBITRUM: ChainProfile(
        chain_id=42161,
        name="Arbitrum",
        native_symbol="ETH",
        gas_price_multiplier=120,
        l1_gas_in_limit=True,
        unreliable_gas_estimation=True,
    ),
    ChainId.AVALANCHE: ChainProfile(
        chain_id=43114,
        name="Avalanche-C",
        native_symbol="AVAX",
        gas_price_multiplier=120,
    ),
    ChainId.OPTIMISM: ChainProfile(
        chain_id=10,
        name="Optimism",
        native_symbol="ETH",
        gas_price_multiplier=120,
        has_l1_surcharge=True,
    ),
})


# ======================
# Token Configurations
# ======================

def _token(chain_id: int, symbol: TokenSymbol, address: str, decimals: int = 6) -> TokenProfile:
    return TokenProfile(chain_id=chain_id, symbol=symbol.value, contract_address=address, decimals=decimals)


TOKENS: Mapping[tuple[int, str], TokenProfile] = MappingProxyType({
    (t.chain_id, t.symbol): t
    for t in (
        _token(1, TokenSymbol.USDC, "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"),
        _token(1, TokenSymbol.USDT, "0xdAC17F958D2ee523a2206206994597C13D831ec7"),
        _token(137, TokenSymbol.USDC, "0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359"),
        _token(137, TokenSymbol.USDT, "0xc2132D05D31c914a87C6611C10748AEb04B58e8F"),
        _token(43114, TokenSymbol.USDC, "0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E"),
        _token(43114, TokenSymbol.USDT, "0x9702230A8Ea53601f5cD2dc00fDBc13d4dF4A8c7"),
        _token(42161, TokenSymbol.USDC, "0xaf88d065e77c8cC2239327C5EDb3A432268e5831"),
        _token(42161, TokenSymbol.USDT, "0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9"),
        _token(10, TokenSymbol.USDC, "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85"),
        _token(10, TokenSymbol.USDT, "0x94b008aA00579c1307B0EF2c499aD98a8ce58e58"),
    )
})


# Max-length placeholder used to size signature verification gas
MOCK_SIGNATURE = {
    "signature": "0x" + "ff" * 65,
    "signer": "0x" + "ff" * 20,
}


class ChainRegistry:
    """Read-only view over the chain and token tables.

    Built once at startup and shared by every component.
    """

    def __init__(
        self,
        chains: Mapping[int, ChainProfile],
        tokens: Mapping[tuple[int, str], TokenProfile],
    ):
        self._chains = MappingProxyType(dict(chains))
        self._tokens = MappingProxyType(dict(tokens))

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChainRegistry":
        """Create the default registry with RPC URLs taken from settings."""
        chains = {
            chain_id: replace(profile, rpc_url=settings.get_rpc_url(chain_id))
            for chain_id, profile in CHAINS.items()
        }
        return cls(chains, TOKENS)

    @property
    def chain_ids(self) -> list[int]:
        """Supported chain ids in registry order."""
        return list(self._chains.keys())

    def get_chain(self, chain_id: int) -> Optional[ChainProfile]:
        """Get chain profile by id."""
        return self._chains.get(int(chain_id))

    def require_chain(self, chain_id: int) -> ChainProfile:
        """Get chain profile by id, raising KeyError for unknown chains."""
        profile = self.get_chain(chain_id)
        if profile is None:
            raise KeyError(f"Unsupported chain: {chain_id}")
        return profile

    def get_all_chains(self) -> list[ChainProfile]:
        """Get all chain profiles."""
        return list(self._chains.values())

    def get_token(self, chain_id: int, symbol: str) -> Optional[TokenProfile]:
        """Get token profile, None if the token is not supported on the chain."""
        return self._tokens.get((int(chain_id), symbol.upper()))

    def get_tokens(self, chain_id: int) -> list[TokenProfile]:
        """Get every supported token on a chain."""
        return [t for (cid, _), t in self._tokens.items() if cid == int(chain_id)]
