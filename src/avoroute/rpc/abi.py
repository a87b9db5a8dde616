"""Call data encoding and return value decoding for the contracts we read.

Contracts:
- ERC-20 token (balanceOf, transfer)
- AvoForwarder (simulateV1, executeV1, computeAvocado)
- Avocado wallet (requiredSigners, avoNonce)
- OP-stack gas price oracle (l1BaseFee, scalar, getL1GasUsed)
- Arbitrum NodeInterface (gasEstimateL1Component)
"""

from typing import Any, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import encode_hex, function_signature_to_4byte_selector, to_bytes, to_checksum_address

from avoroute.models import Signature, TransactionPayload

ACTION_TYPE = "(address,bytes,uint256,uint256)"
CAST_PARAMS_TYPE = f"({ACTION_TYPE}[],uint256,int256,bytes32,address,bytes)"
FORWARD_PARAMS_TYPE = "(uint256,uint256,uint256,uint256,uint256)"
SIGNATURES_TYPE = "(bytes,address)[]"

FORWARDER_ARG_TYPES = ["address", "uint32", CAST_PARAMS_TYPE, FORWARD_PARAMS_TYPE, SIGNATURES_TYPE]
SIMULATION_RESULT_TYPES = ["uint256", "uint256", "bool", "bool", "string"]

# OP-stack gas price oracle predeploys
OP_GAS_PRICE_ORACLE = "0x420000000000000000000000000000000000000F"
SCROLL_GAS_PRICE_ORACLE = "0x5300000000000000000000000000000000000002"
SCROLL_CHAIN_ID = 534352

# Arbitrum NodeInterface precompile
ARB_NODE_INTERFACE = "0x00000000000000000000000000000000000000C8"


def hex_to_bytes(value: str) -> bytes:
    """Convert a 0x-prefixed hex string to bytes ("0x" -> b"")."""
    if not value or value == "0x":
        return b""
    return to_bytes(hexstr=value)


def encode_call(signature: str, arg_types: Sequence[str], args: Sequence[Any]) -> str:
    """Encode a function call as 0x-prefixed call data."""
    selector = function_signature_to_4byte_selector(signature)
    if not arg_types:
        return encode_hex(selector)
    return encode_hex(selector + encode(list(arg_types), list(args)))


def decode_result(types: Sequence[str], data: str) -> tuple:
    """Decode eth_call return data.

    Raises:
        ValueError: empty or malformed return data (e.g. no code at the address)
    """
    try:
        return decode(list(types), hex_to_bytes(data))
    except DecodingError as e:
        raise ValueError(f"Cannot decode {list(types)} from {data[:66]}: {e}") from e


# ======================
# ERC-20
# ======================

def encode_balance_of(owner: str) -> str:
    return encode_call("balanceOf(address)", ["address"], [to_checksum_address(owner)])


def encode_transfer(to: str, amount: int) -> str:
    return encode_call("transfer(address,uint256)", ["address", "uint256"], [to_checksum_address(to), amount])


# ======================
# Avocado wallet
# ======================

def encode_required_signers() -> str:
    return encode_call("requiredSigners()", [], [])


def encode_avo_nonce() -> str:
    return encode_call("avoNonce()", [], [])


# ======================
# AvoForwarder
# ======================

def _cast_params(payload: TransactionPayload) -> tuple:
    params = payload.params
    actions = [
        (
            to_checksum_address(action.target),
            hex_to_bytes(action.data),
            int(action.value),
            int(action.operation),
        )
        for action in params.actions
    ]
    return (
        actions,
        int(params.id),
        int(params.avo_nonce),
        hex_to_bytes(params.salt).rjust(32, b"\x00"),
        to_checksum_address(params.source),
        hex_to_bytes(params.metadata),
    )


def _forward_params(payload: TransactionPayload) -> tuple:
    fp = payload.forward_params
    return (int(fp.gas), int(fp.gas_price), int(fp.valid_after), int(fp.valid_until), int(fp.value))


def encode_forwarder_call(
    function: str,
    owner: str,
    index: int,
    payload: TransactionPayload,
    signatures: Sequence[Signature],
) -> str:
    """Encode simulateV1 / executeV1 call data."""
    signature = f"{function}({','.join(FORWARDER_ARG_TYPES)})"
    return encode_call(
        signature,
        FORWARDER_ARG_TYPES,
        [
            to_checksum_address(owner),
            int(index),
            _cast_params(payload),
            _forward_params(payload),
            [(hex_to_bytes(s.signature), to_checksum_address(s.signer)) for s in signatures],
        ],
    )


def encode_compute_avocado(owner: str, index: int) -> str:
    return encode_call(
        "computeAvocado(address,uint32)", ["address", "uint32"], [to_checksum_address(owner), int(index)]
    )


# ======================
# L1 fee contracts
# ======================

def gas_price_oracle_address(chain_id: int) -> str:
    return SCROLL_GAS_PRICE_ORACLE if int(chain_id) == SCROLL_CHAIN_ID else OP_GAS_PRICE_ORACLE


def encode_l1_base_fee() -> str:
    return encode_call("l1BaseFee()", [], [])


def encode_scalar() -> str:
    return encode_call("scalar()", [], [])


def encode_get_l1_gas_used(data: bytes) -> str:
    return encode_call("getL1GasUsed(bytes)", ["bytes"], [data])


def encode_gas_estimate_l1_component(to: str, contract_creation: bool, data: str) -> str:
    return encode_call(
        "gasEstimateL1Component(address,bool,bytes)",
        ["address", "bool", "bytes"],
        [to_checksum_address(to), contract_creation, hex_to_bytes(data)],
    )
