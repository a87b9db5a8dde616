"""Gas limit and fee model for wallet casts relayed through the forwarder.

The gas limit is built from independently estimated parts:

    intrinsic + signature verification + event emission + safe buffer
    + call data + deployment + cast + L1 gas component

and the fee is converted to a fiat amount scaled by 1e18 so quotes from
different chains can be compared directly.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Optional, Union

import rlp

from avoroute.chains import ChainProfile
from avoroute.config import GasTuning
from avoroute.models import NON_SEQUENTIAL_NONCE, FeeData, TransactionPayload, TransactionRequest, WalletMetadata
from avoroute.rpc.abi import hex_to_bytes

logger = logging.getLogger(__name__)

INTRINSIC_GAS = 21_000

# Signature verification
SIGNATURE_BASE_GAS = 16_500
SIGNATURE_PER_SIGNER_GAS = 15_000
SEQUENTIAL_NONCE_GAS = 5_000
NON_SEQUENTIAL_NONCE_GAS = 30_000 + 2_500

# Event emission
EVENT_BASE_GAS = 15_000
EVENT_PER_SIGNER_GAS = 400
EVENT_PER_METADATA_BYTE_GAS = 8

# Safe buffer
UNRELIABLE_CHAIN_BUFFER_GAS = 100_000
BUFFER_BASE_GAS = 12_500
BUFFER_PER_SIGNER_GAS = 5_000

# Call data
ZERO_BYTE_GAS = 4
NON_ZERO_BYTE_GAS = 16
CALL_DATA_ENVELOPE_GAS = 100 * NON_ZERO_BYTE_GAS

# EIP-1559 fee processing
BASE_FEE_MARKUP_PERCENT = 130
EIP1559_PRICE_MARKUP = Decimal("1.1")

MULTIPLIER_BPS_DIVISOR = 8000

ETHEREUM_GAS_MULTIPLIER = 1.1


def signature_verification_gas(required_signers: int, nonce: str) -> int:
    """Gas spent verifying signatures and the nonce.

    Non-sequential nonces ("-1") are checked against a used-hash mapping and
    cost considerably more than a sequential counter.
    """
    nonce_gas = NON_SEQUENTIAL_NONCE_GAS if nonce == NON_SEQUENTIAL_NONCE else SEQUENTIAL_NONCE_GAS
    return SIGNATURE_BASE_GAS + required_signers * SIGNATURE_PER_SIGNER_GAS + nonce_gas


def event_emission_gas(payload: TransactionPayload, required_signers: int) -> int:
    """Gas for the executed/failed event, which logs signers and metadata."""
    return (
        EVENT_BASE_GAS
        + required_signers * EVENT_PER_SIGNER_GAS
        + payload.params.metadata_bytes * EVENT_PER_METADATA_BYTE_GAS
    )


def safe_buffer_gas(chain: ChainProfile, required_signers: int) -> int:
    if chain.unreliable_gas_estimation:
        return UNRELIABLE_CHAIN_BUFFER_GAS
    return BUFFER_BASE_GAS + BUFFER_PER_SIGNER_GAS * required_signers


def call_data_gas(tx: TransactionRequest) -> int:
    """Call data cost of the RLP encoded (data, from, to) triple."""
    encoded = rlp.encode([hex_to_bytes(tx.data), hex_to_bytes(tx.from_address), hex_to_bytes(tx.to)])
    zero_bytes = encoded.count(0)
    non_zero_bytes = len(encoded) - zero_bytes
    return zero_bytes * ZERO_BYTE_GAS + non_zero_bytes * NON_ZERO_BYTE_GAS + CALL_DATA_ENVELOPE_GAS


def compute_gas_multiplier(
    chain_id: Union[int, str],
    version: int = 2,
    is_multisig: bool = False,
    tuning: Optional[GasTuning] = None,
) -> float:
    """Historical gas estimation error margin of a chain.

    Ethereum is fixed at 1.1 and Arbitrum depends on the wallet version;
    everything else comes from the tuning table.
    """
    tuning = tuning or GasTuning()
    chain_key = str(int(chain_id))

    if chain_key == "1":
        return ETHEREUM_GAS_MULTIPLIER

    if chain_key == "42161":
        if is_multisig:
            return 1.15 if version == 1 else 1.5
        return 3.0 if version == 1 else 1.5

    return tuning.gas_limit_multipliers.get(chain_key, tuning.default_gas_limit_multiplier)


@dataclass(frozen=True)
class GasBreakdown:
    """Independently estimated parts of a gas limit."""

    signature_verification: int
    event_emission: int
    safe_buffer: int
    call_data: int
    deployment: int
    cast: int
    l1_gas: int = 0
    intrinsic: int = INTRINSIC_GAS

    @property
    def total(self) -> int:
        return (
            self.intrinsic
            + self.signature_verification
            + self.event_emission
            + self.safe_buffer
            + self.call_data
            + self.deployment
            + self.cast
            + self.l1_gas
        )


def build_gas_breakdown(
    chain: ChainProfile,
    payload: TransactionPayload,
    metadata: WalletMetadata,
    tx: TransactionRequest,
    deployment_gas: int,
    cast_gas: int,
    l1_gas: int = 0,
) -> GasBreakdown:
    signers = metadata.required_signers
    return GasBreakdown(
        signature_verification=signature_verification_gas(signers, metadata.next_nonce),
        event_emission=event_emission_gas(payload, signers),
        safe_buffer=safe_buffer_gas(chain, signers),
        call_data=call_data_gas(tx),
        deployment=deployment_gas,
        cast=cast_gas,
        l1_gas=l1_gas if chain.l1_gas_in_limit else 0,
    )


def compose_gas_limit(
    breakdown: GasBreakdown,
    payload: TransactionPayload,
    chain: ChainProfile,
    tuning: Optional[GasTuning] = None,
) -> int:
    """Total gas limit with flashloan and large-transaction buffers applied."""
    tuning = tuning or GasTuning()
    gas_limit = Decimal(breakdown.total)

    # Flashloan batches are consistently underestimated by the simulation
    if payload.is_flashloan:
        gas_limit = (gas_limit * tuning.flashloan_gas_multiplier).quantize(Decimal(1), rounding=ROUND_HALF_UP)

    # Chains with the L1 component in the gas limit already account for it
    if gas_limit >= tuning.large_tx_gas_threshold and not chain.l1_gas_in_limit:
        buffer = gas_limit / tuning.large_tx_buffer_denominator * tuning.large_tx_buffer_numerator
        gas_limit = (gas_limit + buffer).quantize(Decimal(1), rounding=ROUND_HALF_UP)

    return int(gas_limit)


def process_fee_data(raw: FeeData, chain: ChainProfile) -> FeeData:
    """Apply the chain's price markup to raw provider fee data.

    EIP-1559: priority fee marked up by the chain multiplier and the max fee
    set to the last base fee +30% plus that priority fee. Legacy: gas price
    marked up by the chain multiplier.
    """
    multiplier = chain.gas_price_multiplier
    if raw.last_base_fee_per_gas is not None and raw.max_priority_fee_per_gas is not None:
        priority = raw.max_priority_fee_per_gas * multiplier // 100
        max_fee = raw.last_base_fee_per_gas * BASE_FEE_MARKUP_PERCENT // 100 + priority
        return FeeData(
            max_fee_per_gas=max_fee,
            max_priority_fee_per_gas=priority,
            last_base_fee_per_gas=raw.last_base_fee_per_gas,
        )

    if raw.gas_price is None:
        raise ValueError(f"No gas price reported for chain {chain.chain_id}")
    return FeeData(gas_price=raw.gas_price * multiplier // 100)


@dataclass(frozen=True)
class GasPricing:
    """Base gas price (wei) and the price multiplier in basis-hundreds."""

    base_gas_price: Decimal
    price_multiplier: Decimal


def derive_gas_pricing(fee_data: FeeData, chain: ChainProfile) -> GasPricing:
    """Recover the un-marked-up base price and the multiplier applied to it.

    The same multiplier is reapplied to the final fee, so base price and
    final price stay consistent whatever format the chain reports.
    """
    if fee_data.max_fee_per_gas is not None:
        max_fee = Decimal(fee_data.max_fee_per_gas)
        base_fee = Decimal(fee_data.last_base_fee_per_gas or 0)
        floor_price = base_fee + Decimal(fee_data.max_priority_fee_per_gas or 0)
        if floor_price == 0:
            # Zero base and priority fee: nothing to mark up
            return GasPricing(base_gas_price=Decimal(0), price_multiplier=Decimal(chain.gas_price_multiplier))
        price_multiplier = max_fee / floor_price * EIP1559_PRICE_MARKUP * 100
        base_gas_price = max_fee / price_multiplier * 100
    else:
        if fee_data.gas_price is None:
            raise ValueError(f"No gas price reported for chain {chain.chain_id}")
        price_multiplier = Decimal(chain.gas_price_multiplier)
        base_gas_price = Decimal(fee_data.gas_price) / price_multiplier * 100

    return GasPricing(base_gas_price=base_gas_price, price_multiplier=price_multiplier)


@dataclass(frozen=True)
class FeeAmount:
    """Final fee (fiat x 1e18) and the combined multiplier in basis points."""

    fee: int
    multiplier: int


def compute_fee_amount(
    gas_limit: int,
    pricing: GasPricing,
    l1_fee: Decimal,
    native_token_price: Decimal,
    gas_limit_multiplier: float,
    tuning: Optional[GasTuning] = None,
) -> FeeAmount:
    """Convert a gas limit into a fiat fee with all multipliers applied."""
    tuning = tuning or GasTuning()
    gas_limit_pct = Decimal(round(gas_limit_multiplier * 100))
    multiplier = gas_limit_pct * pricing.price_multiplier

    gas_fee_wei = Decimal(gas_limit) * pricing.base_gas_price + Decimal(l1_fee)
    fee = (gas_fee_wei * native_token_price * multiplier / 10_000 * tuning.fee_safety_margin).to_integral_value(
        rounding=ROUND_FLOOR
    )
    fee = max(int(tuning.min_fee_amount), int(fee))

    multiplier_bps = (multiplier / MULTIPLIER_BPS_DIVISOR * 10_000).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return FeeAmount(fee=fee, multiplier=int(multiplier_bps))
