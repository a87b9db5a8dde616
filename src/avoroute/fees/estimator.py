"""Fee quotes for casting a set of actions through a wallet on one chain.

Flow:
1. Read wallet metadata (required signers, nonce), cache-backed
2. Build the estimation payload
3. Concurrently fetch fee data, gas limit, native token price and L1 fee
4. Combine everything with the gas fee model into a FeeQuote
"""

import asyncio
import logging
from decimal import Decimal
from typing import Optional, Sequence

from avoroute.chains import MOCK_SIGNATURE
from avoroute.config import GasTuning
from avoroute.errors import AvoRouteError, MetadataUnavailableError
from avoroute.fees.gas import (
    build_gas_breakdown,
    compose_gas_limit,
    compute_fee_amount,
    compute_gas_multiplier,
    derive_gas_pricing,
    process_fee_data,
)
from avoroute.fees.l1 import L1FeeEstimator, unsigned_signatures
from avoroute.fees.prices import NativeTokenPriceFeed
from avoroute.models import (
    FeeData,
    FeeQuote,
    Signature,
    TransactionAction,
    TransactionPayload,
    WalletMetadata,
    prepare_payload,
)
from avoroute.result import ChainResult
from avoroute.utils.timing import timed
from avoroute.wallet.avocado import AvocadoWallet

logger = logging.getLogger(__name__)

# Fee quotes are priced with the v1 wallet margins
FEE_WALLET_VERSION = 1


def mock_signatures(required_signers: int) -> list[Signature]:
    """Max-length placeholder signatures, one per required signer."""
    return [Signature(**MOCK_SIGNATURE) for _ in range(max(1, required_signers))]


class FeeEstimator:
    """Estimates the fiat fee of a cast for one wallet on one chain."""

    def __init__(
        self,
        wallet: AvocadoWallet,
        eoa_address: str,
        wallet_index: int,
        price_feed: NativeTokenPriceFeed,
        l1_fees: Optional[L1FeeEstimator] = None,
        tuning: Optional[GasTuning] = None,
        timeout: Optional[float] = None,
        use_cache: bool = True,
    ):
        self.wallet = wallet
        self.chain = wallet.chain
        self.chain_id = int(wallet.chain_id)
        self.eoa_address = eoa_address
        self.wallet_index = int(wallet_index)
        self.price_feed = price_feed
        self.l1_fees = l1_fees or L1FeeEstimator(wallet.rpc, wallet.chain)
        self.tuning = tuning or GasTuning()
        self.timeout = timeout
        self.use_cache = use_cache

    async def estimate(
        self,
        actions: Sequence[TransactionAction],
        strict: bool = False,
        require_metadata: bool = False,
        action_id: str = "0",
    ) -> ChainResult[FeeQuote]:
        """Estimate the fee of casting ``actions``.

        Args:
            actions: Actions executed by the wallet
            strict: Propagate errors instead of returning an unavailable result
            require_metadata: Fail with MetadataUnavailableError when the
                wallet metadata cannot be read
            action_id: Action set id (21 marks a mixed flashloan batch)

        Returns:
            Successful result with the quote, or unavailable with the reason
        """
        try:
            quote = await asyncio.wait_for(
                self._estimate(list(actions), require_metadata, action_id),
                timeout=self.timeout,
            )
        except MetadataUnavailableError:
            raise
        except asyncio.TimeoutError:
            logger.warning(f"Fee estimation timed out on chain {self.chain_id} after {self.timeout}s")
            if strict:
                raise
            return ChainResult.unavailable(self.chain_id, "timeout")
        except (AvoRouteError, ValueError) as e:
            logger.warning(f"Fee estimation failed on chain {self.chain_id}: {e}")
            if strict:
                raise
            return ChainResult.unavailable(self.chain_id, str(e))
        except Exception as e:
            if strict:
                raise
            logger.exception(f"Unexpected fee estimation error on chain {self.chain_id}: {e}")
            return ChainResult.unavailable(self.chain_id, f"{type(e).__name__}: {e}")

        return ChainResult.success(self.chain_id, quote)

    async def _estimate(
        self,
        actions: list[TransactionAction],
        require_metadata: bool,
        action_id: str,
    ) -> FeeQuote:
        async with timed(f"Fee estimation: {self.chain_id}", logger):
            metadata = await self.wallet.get_wallet_metadata(self.use_cache, required=require_metadata)
            payload = prepare_payload(actions, metadata.next_nonce, action_id)

            fee_data, gas_limit, native_price, l1_fee = await asyncio.gather(
                self._fee_data(),
                self._gas_limit(payload, metadata),
                self.price_feed.price(self.chain_id),
                self._l1_data_fee(payload),
            )

        pricing = derive_gas_pricing(fee_data, self.chain)
        gas_limit_multiplier = compute_gas_multiplier(
            self.chain_id, version=FEE_WALLET_VERSION, tuning=self.tuning
        )
        amount = compute_fee_amount(
            gas_limit,
            pricing,
            l1_fee,
            native_price,
            gas_limit_multiplier,
            tuning=self.tuning,
        )

        logger.debug(
            f"Fee on chain {self.chain_id}: gas_limit={gas_limit} base_price={pricing.base_gas_price:.0f} "
            f"price_multiplier={pricing.price_multiplier:.2f} native_price={native_price} "
            f"l1_fee={l1_fee:.0f} fee={amount.fee} multiplier={amount.multiplier}"
        )
        return FeeQuote(
            chain_id=self.chain_id,
            chain_name=self.chain.name,
            fee=amount.fee,
            multiplier=amount.multiplier,
        )

    async def _fee_data(self) -> FeeData:
        async with timed(f"Fee data: {self.chain_id}", logger):
            raw = await self.wallet.rpc.get_fee_data()
        return process_fee_data(raw, self.chain)

    async def _gas_limit(self, payload: TransactionPayload, metadata: WalletMetadata) -> int:
        """Simulate the cast, then size call data and the L1 gas component."""
        signatures = mock_signatures(metadata.required_signers)
        simulation = await self.wallet.simulate_transaction(
            self.eoa_address, self.wallet_index, signatures, payload
        )
        tx = self.wallet.get_transaction_request(self.eoa_address, self.wallet_index, signatures, payload)
        l1_gas = await self.l1_fees.l1_gas_component(tx)

        breakdown = build_gas_breakdown(
            self.chain,
            payload,
            metadata,
            tx,
            deployment_gas=simulation.deployment_gas_used,
            cast_gas=simulation.cast_gas_used,
            l1_gas=l1_gas,
        )
        return compose_gas_limit(breakdown, payload, self.chain, self.tuning)

    async def _l1_data_fee(self, payload: TransactionPayload) -> Decimal:
        if not self.chain.has_l1_surcharge:
            return Decimal(0)

        # L1 data is sized before signing, with the owner as the only signer
        tx = self.wallet.get_transaction_request(
            self.eoa_address,
            self.wallet_index,
            unsigned_signatures([self.eoa_address]),
            payload,
        )
        async with timed(f"L1 data fee: {self.chain_id}", logger):
            return await self.l1_fees.l1_data_fee(tx)
