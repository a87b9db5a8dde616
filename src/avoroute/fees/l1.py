"""L1 cost of rollup transactions.

Two mechanisms are supported:
- OP-stack chains charge an L1 data fee on top of L2 execution, priced by
  the gas price oracle predeploy.
- Arbitrum reports the L1 cost as extra L2 gas through NodeInterface.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Sequence

import rlp

from avoroute.chains import ChainProfile
from avoroute.models import Signature, TransactionPayload, TransactionRequest
from avoroute.rpc import abi
from avoroute.rpc.client import ChainRpcClient

logger = logging.getLogger(__name__)

# Fixed allowances for data the populated transaction does not carry yet
SIGNATURE_SIZE_GAS = 65 * 16
EXTRA_PARAMS_SIZE_GAS = 32 * 16


def rlp_encode_request(tx: TransactionRequest) -> bytes:
    """RLP encoding of (data, from, to) used for L1 sizing."""
    return rlp.encode([abi.hex_to_bytes(tx.data), abi.hex_to_bytes(tx.from_address), abi.hex_to_bytes(tx.to)])


def unsigned_signatures(signers: Sequence[str]) -> list[Signature]:
    """Empty signatures for each signer, as seen before signing."""
    return [Signature(signature="0x", signer=signer) for signer in signers]


class L1FeeEstimator:
    """Reads L1 surcharge components from a chain's fee contracts."""

    def __init__(self, rpc: ChainRpcClient, chain: ChainProfile):
        self.rpc = rpc
        self.chain = chain

    async def l1_data_fee(self, tx: TransactionRequest) -> Decimal:
        """L1 data fee in wei for OP-stack chains, 0 elsewhere.

        Args:
            tx: Populated executeV1 transaction (with unsigned signatures)
        """
        if not self.chain.has_l1_surcharge:
            return Decimal(0)

        oracle = abi.gas_price_oracle_address(self.chain.chain_id)
        encoded = rlp_encode_request(tx)
        l1_base_fee_raw, scalar_raw, l1_gas_used_raw = await asyncio.gather(
            self.rpc.eth_call(oracle, abi.encode_l1_base_fee()),
            self.rpc.eth_call(oracle, abi.encode_scalar()),
            self.rpc.eth_call(oracle, abi.encode_get_l1_gas_used(encoded)),
        )
        (l1_base_fee,) = abi.decode_result(["uint256"], l1_base_fee_raw)
        (scalar,) = abi.decode_result(["uint256"], scalar_raw)
        (l1_gas_used,) = abi.decode_result(["uint256"], l1_gas_used_raw)

        l1_gas_limit = Decimal(SIGNATURE_SIZE_GAS + EXTRA_PARAMS_SIZE_GAS + l1_gas_used)
        fee = l1_gas_limit * Decimal(scalar) * Decimal(l1_base_fee) / Decimal(self.chain.l1_fee_divisor)
        logger.debug(
            f"L1 data fee on chain {self.chain.chain_id}: gas={l1_gas_limit} scalar={scalar} "
            f"base_fee={l1_base_fee} fee={fee}"
        )
        return fee

    async def l1_gas_component(self, tx: TransactionRequest) -> int:
        """Extra L2 gas charged for L1 posting on Arbitrum-style chains, 0 elsewhere."""
        if not self.chain.l1_gas_in_limit:
            return 0

        result = await self.rpc.eth_call(
            abi.ARB_NODE_INTERFACE,
            abi.encode_gas_estimate_l1_component(tx.to, False, tx.data),
        )
        gas_estimate_for_l1, _base_fee, _l1_base_fee_estimate = abi.decode_result(
            ["uint64", "uint256", "uint256"], result
        )
        return int(gas_estimate_for_l1)
