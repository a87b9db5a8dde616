"""Core data structures shared by the fee model, estimator and optimizer."""

import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from eth_abi import encode
from eth_utils import encode_hex

NON_SEQUENTIAL_NONCE = "-1"

# Referral source used for every estimation payload
DEFAULT_SOURCE = "0x000000000000000000000000000000000000Cad0"

# Action set id of flashloan batches with mixed call/delegatecall
FLASHLOAN_MIXED_ACTION_ID = 21


@dataclass(frozen=True)
class TransactionAction:
    """One call executed by the wallet.

    operation: 0 -> call, 1 -> delegatecall, 2 -> flashloan (via call)
    """

    target: str
    data: str
    value: str = "0"
    operation: str = "0"


@dataclass(frozen=True)
class TransactionParams:
    """Cast parameters signed by the wallet owner."""

    actions: tuple[TransactionAction, ...]
    id: str = "0"
    avo_nonce: str = "0"
    salt: str = field(default_factory=lambda: encode_hex(encode(["uint256"], [int(time.time() * 1000)])))
    source: str = DEFAULT_SOURCE
    metadata: str = "0x"

    @property
    def metadata_bytes(self) -> int:
        """Byte length of the hex-encoded metadata."""
        raw = self.metadata[2:] if self.metadata.startswith("0x") else self.metadata
        return len(raw) // 2


@dataclass(frozen=True)
class ForwardParams:
    """Relayer bounds. All zero for estimation."""

    gas: str = "0"
    gas_price: str = "0"
    valid_after: str = "0"
    valid_until: str = "0"
    value: str = "0"


@dataclass(frozen=True)
class TransactionPayload:
    """Everything the forwarder needs to cast the actions."""

    params: TransactionParams
    forward_params: ForwardParams = field(default_factory=ForwardParams)

    @property
    def is_flashloan(self) -> bool:
        return int(self.params.id) == FLASHLOAN_MIXED_ACTION_ID


def prepare_payload(actions: list[TransactionAction], nonce: str, action_id: str = "0") -> TransactionPayload:
    """Build an estimation payload around the given actions."""
    return TransactionPayload(
        params=TransactionParams(actions=tuple(actions), id=action_id, avo_nonce=nonce),
    )


@dataclass(frozen=True)
class Signature:
    """A signer and its signature bytes (hex)."""

    signature: str
    signer: str


@dataclass(frozen=True)
class WalletMetadata:
    """Signer requirements and nonce of a wallet on one chain."""

    required_signers: int = 1
    next_nonce: str = "0"


@dataclass(frozen=True)
class SimulationResult:
    """Gas usage reported by the forwarder simulation."""

    cast_gas_used: int
    deployment_gas_used: int
    is_deployed: bool
    success: bool
    revert_reason: str = ""


@dataclass(frozen=True)
class TransactionRequest:
    """Populated transaction used for call data sizing."""

    data: str
    from_address: str
    to: str


@dataclass(frozen=True)
class FeeData:
    """Live fee market data in wei."""

    gas_price: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None
    last_base_fee_per_gas: Optional[int] = None


@dataclass(frozen=True)
class FeeQuote:
    """Fiat-denominated fee for one chain.

    fee is the fiat amount scaled by 1e18, multiplier is in basis points.
    """

    chain_id: int
    chain_name: str
    fee: int
    multiplier: int

    @property
    def fee_amount(self) -> Decimal:
        """Fee in fiat units."""
        return Decimal(self.fee) / Decimal(10**18)


@dataclass(frozen=True)
class Balance:
    """Token balance of the wallet on a chain, in token units."""

    chain_id: int
    amount: Decimal


@dataclass(frozen=True)
class SourcingEntry:
    """One leg of a sourcing plan."""

    chain_id: int
    chain_name: str
    amount_sourced: Decimal
    fees: Decimal
