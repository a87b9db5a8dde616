"""Sourcing orchestration.

Flow:
1. Resolve the wallet address (explicit or derived from owner + index)
2. Concurrently read balances and estimate a transfer fee on every chain
   except the destination
3. Feed the successful results to the RouteOptimizer
"""

import asyncio
import logging
from decimal import Decimal
from typing import Optional

from avoroute.cache import CacheBackend
from avoroute.chains import ChainRegistry, TokenProfile
from avoroute.config import Settings
from avoroute.errors import ChainUnavailableError, ValidationError
from avoroute.fees.estimator import FeeEstimator
from avoroute.fees.prices import NativeTokenPriceFeed
from avoroute.models import Balance, FeeQuote, SourcingEntry, TransactionAction
from avoroute.result import ChainResult, successful
from avoroute.routing.optimizer import RouteOptimizer
from avoroute.rpc import abi
from avoroute.rpc.client import RpcPool
from avoroute.utils.timing import timed
from avoroute.wallet.avocado import AddressResolver, AvocadoWallet
from avoroute.wallet.balances import BalanceProvider

logger = logging.getLogger(__name__)

# Marker action appended to every sourcing estimate
MARKER_ACTION_TARGET = "0x9800020b610194dBa52CF606E8Aa142F9F256166"
MARKER_ACTION_DATA = "0x0001"


def build_sourcing_actions(token: TokenProfile, recipient: str) -> list[TransactionAction]:
    """Minimal action set used to price moving ``token`` off a chain."""
    return [
        TransactionAction(
            target=token.contract_address,
            data=abi.encode_transfer(recipient, 1),
        ),
        TransactionAction(target=MARKER_ACTION_TARGET, data=MARKER_ACTION_DATA),
    ]


class RouteFinder:
    """Finds the cheapest way to gather a token amount on a destination chain."""

    def __init__(
        self,
        registry: ChainRegistry,
        rpc_pool: RpcPool,
        cache: CacheBackend,
        price_feed: NativeTokenPriceFeed,
        settings: Settings,
        optimizer: Optional[RouteOptimizer] = None,
    ):
        self.registry = registry
        self.rpc_pool = rpc_pool
        self.cache = cache
        self.price_feed = price_feed
        self.settings = settings
        self.tuning = settings.gas_tuning()
        self.balances = BalanceProvider(registry, rpc_pool)
        self.optimizer = optimizer or RouteOptimizer(settings.max_route_candidates)

    def wallet(self, chain_id: int, address: str) -> AvocadoWallet:
        """Wallet handle on one chain, sharing the pooled RPC client."""
        return AvocadoWallet(
            chain=self.registry.require_chain(chain_id),
            address=address,
            rpc=self.rpc_pool.get(chain_id),
            cache=self.cache,
            forwarder_address=self.settings.avo_forwarder_address,
            signers_ttl=self.settings.avocado_required_signers_cache_expiry,
            nonce_ttl=self.settings.avocado_nonce_cache_expiry,
        )

    def fee_estimator(
        self,
        chain_id: int,
        wallet_address: str,
        eoa_address: str,
        index: int,
        use_cache: bool = True,
    ) -> FeeEstimator:
        return FeeEstimator(
            wallet=self.wallet(chain_id, wallet_address),
            eoa_address=eoa_address,
            wallet_index=index,
            price_feed=self.price_feed,
            tuning=self.tuning,
            timeout=self.settings.chain_timeout_seconds,
            use_cache=use_cache,
        )

    async def resolve_wallet_address(
        self,
        eoa_address: str,
        index: str = "0",
        wallet_address: Optional[str] = None,
        use_cache: bool = True,
    ) -> str:
        """Explicit wallet address, or the one derived from owner and index."""
        if wallet_address:
            return wallet_address

        resolver_chain = self.settings.address_resolver_chain_id
        resolver = AddressResolver(
            rpc=self.rpc_pool.get(resolver_chain),
            cache=self.cache,
            forwarder_address=self.settings.avo_forwarder_address,
            ttl=self.settings.avocado_address_cache_expiry,
        )
        return await resolver.compute(eoa_address, index, use_cache)

    async def find_routes(
        self,
        chain_id: int,
        token_symbol: str,
        eoa_address: str,
        amount: Decimal,
        wallet_address: Optional[str] = None,
        index: str = "0",
        use_cache: bool = True,
    ) -> list[SourcingEntry]:
        """Plan which chains to source ``amount`` of ``token_symbol`` from.

        Raises:
            ValidationError: unknown chain or token
            InsufficientBalanceError: balances cannot cover the amount
            ChainUnavailableError: balances exist but no chain could be priced
        """
        if self.registry.get_chain(chain_id) is None:
            raise ValidationError(f"Unsupported chain: {chain_id}")
        token_symbol = token_symbol.upper()
        if not any(self.registry.get_token(cid, token_symbol) for cid in self.registry.chain_ids):
            raise ValidationError(f"Unsupported token: {token_symbol}")

        address = await self.resolve_wallet_address(eoa_address, index, wallet_address, use_cache)
        source_chains = [cid for cid in self.registry.chain_ids if int(cid) != int(chain_id)]
        logger.info(
            f"Sourcing {amount} {token_symbol} to chain {chain_id} for {address} "
            f"from {len(source_chains)} chains"
        )

        async with timed(f"Sourcing fan-out: {len(source_chains)} chains", logger):
            balance_results, quote_results = await asyncio.gather(
                asyncio.gather(*[
                    self._balance(cid, token_symbol, address) for cid in source_chains
                ]),
                asyncio.gather(*[
                    self._quote(cid, token_symbol, address, eoa_address, int(index), use_cache)
                    for cid in source_chains
                ]),
            )

        balances: list[Balance] = successful(balance_results)
        quotes: list[FeeQuote] = successful(quote_results)
        logger.info(f"Found {len(balances)} balances and {len(quotes)} fee quotes")

        if balances and not quotes:
            raise ChainUnavailableError("Unable to estimate fees on any chain")

        return self.optimizer.find_optimal_sources(quotes, balances, amount)

    async def _balance(self, chain_id: int, token_symbol: str, address: str) -> ChainResult[Balance]:
        try:
            return await asyncio.wait_for(
                self.balances.get_balance(chain_id, token_symbol, address),
                timeout=self.settings.chain_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Balance lookup timed out on chain {chain_id}")
            return ChainResult.unavailable(chain_id, "timeout")

    async def _quote(
        self,
        chain_id: int,
        token_symbol: str,
        wallet_address: str,
        eoa_address: str,
        index: int,
        use_cache: bool,
    ) -> ChainResult[FeeQuote]:
        token = self.registry.get_token(chain_id, token_symbol)
        if token is None:
            return ChainResult.unavailable(chain_id, f"{token_symbol} not supported")

        estimator = self.fee_estimator(chain_id, wallet_address, eoa_address, index, use_cache)
        return await estimator.estimate(build_sourcing_actions(token, eoa_address))
