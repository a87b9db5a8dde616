"""Avocado smart-contract wallet access.

Reads signer requirements and nonce from the wallet contract, simulates
casts through the forwarder and builds the unsigned executeV1 transaction
used for call data sizing. Nothing here signs or broadcasts.
"""

import asyncio
import logging
from typing import Optional, Sequence

from eth_account import Account
from eth_utils import to_checksum_address

from avoroute.cache import CacheBackend, CacheKeys
from avoroute.chains import ChainProfile
from avoroute.errors import (
    AvoRouteError,
    MetadataUnavailableError,
    RpcError,
    RpcTransportError,
    SimulationFailedError,
    UpstreamFailure,
)
from avoroute.models import Signature, SimulationResult, TransactionPayload, TransactionRequest, WalletMetadata
from avoroute.rpc import abi
from avoroute.rpc.client import ChainRpcClient
from avoroute.utils.timing import timed

logger = logging.getLogger(__name__)

# Simulations are sent from a burn address so no real account is involved
SIMULATION_SENDER = "0x000000000000000000000000000000000000dEaD"

DEFAULT_SIGNERS_TTL = 300
DEFAULT_NONCE_TTL = 30


class AvocadoWallet:
    """A wallet deployed (or counterfactual) at ``address`` on one chain."""

    def __init__(
        self,
        chain: ChainProfile,
        address: str,
        rpc: ChainRpcClient,
        cache: CacheBackend,
        forwarder_address: str,
        signers_ttl: int = DEFAULT_SIGNERS_TTL,
        nonce_ttl: int = DEFAULT_NONCE_TTL,
    ):
        self.chain = chain
        self.chain_id = chain.chain_id
        self.address = to_checksum_address(address)
        self.rpc = rpc
        self.cache = cache
        self.forwarder_address = to_checksum_address(forwarder_address)
        self.signers_ttl = signers_ttl
        self.nonce_ttl = nonce_ttl

    async def get_wallet_metadata(self, use_cache: bool = True, required: bool = False) -> WalletMetadata:
        """Signer count and nonce packed in a single object.

        Falls back to (1, "0") for undeployed wallets or failed reads. When
        ``required`` is set, an unreachable RPC raises MetadataUnavailableError
        instead of falling back.
        """
        async with timed(f"Avocado wallet metadata: {self.chain_id}", logger):
            required_signers, nonce = await asyncio.gather(
                self.get_required_signers(use_cache, required),
                self.get_nonce(use_cache, required),
            )

        return WalletMetadata(
            required_signers=required_signers or 1,
            next_nonce=nonce or "0",
        )

    async def get_required_signers(self, use_cache: bool = True, required: bool = False) -> Optional[int]:
        """Required signer count, None if the wallet is not deployed or the read fails."""
        key = CacheKeys.required_signers(self.chain_id, self.address)
        if use_cache:
            cached = await self.cache.get(key)
            if cached and cached.isdigit() and int(cached) > 0:
                return int(cached)

        try:
            result = await self.rpc.eth_call(self.address, abi.encode_required_signers())
            (signers,) = abi.decode_result(["uint8"], result)
        except (AvoRouteError, ValueError) as e:
            await self.cache.set(key, "1", self.signers_ttl)
            self._raise_if_required(e, required)
            logger.debug(f"requiredSigners unavailable for {self.address} on {self.chain_id}: {e}")
            return None

        await self.cache.set(key, str(signers), self.signers_ttl)
        return int(signers)

    async def get_nonce(self, use_cache: bool = True, required: bool = False) -> Optional[str]:
        """Current sequential nonce, None if the wallet is not deployed or the read fails."""
        key = CacheKeys.wallet_nonce(self.chain_id, self.address)
        if use_cache:
            cached = await self.cache.get(key)
            if cached:
                return cached

        try:
            result = await self.rpc.eth_call(self.address, abi.encode_avo_nonce())
            (nonce,) = abi.decode_result(["uint256"], result)
        except (AvoRouteError, ValueError) as e:
            await self.cache.set(key, "0", self.nonce_ttl)
            self._raise_if_required(e, required)
            logger.debug(f"avoNonce unavailable for {self.address} on {self.chain_id}: {e}")
            return None

        await self.cache.set(key, str(nonce), self.nonce_ttl)
        return str(nonce)

    def _raise_if_required(self, error: Exception, required: bool) -> None:
        # Reverts and empty code mean "not deployed"; only transport failures are fatal
        if required and isinstance(error, RpcTransportError):
            raise MetadataUnavailableError(self.chain_id, str(error)) from error

    async def is_deployed(self) -> bool:
        code = await self.rpc.get_code(self.address)
        return code not in ("0x", "0x0", "", None)

    async def simulate_transaction(
        self,
        eoa_address: str,
        wallet_index: int,
        signatures: Sequence[Signature],
        payload: TransactionPayload,
    ) -> SimulationResult:
        """Simulate the cast through the forwarder.

        Raises:
            SimulationFailedError: the cast reverted inside the simulation
        """
        data = abi.encode_forwarder_call("simulateV1", eoa_address, wallet_index, payload, signatures)
        async with timed(f"Txn simulation: {self.chain_id}", logger):
            raw = await self.rpc.eth_call(self.forwarder_address, data, from_address=SIMULATION_SENDER)

        cast_gas, deployment_gas, is_deployed, success, revert_reason = abi.decode_result(
            abi.SIMULATION_RESULT_TYPES, raw
        )
        if not success:
            raise SimulationFailedError(revert_reason or "Txn Failed due to unknown reasons!")

        return SimulationResult(
            cast_gas_used=int(cast_gas),
            deployment_gas_used=int(deployment_gas),
            is_deployed=bool(is_deployed),
            success=True,
            revert_reason=revert_reason,
        )

    def get_transaction_request(
        self,
        eoa_address: str,
        wallet_index: int,
        signatures: Sequence[Signature],
        payload: TransactionPayload,
    ) -> TransactionRequest:
        """Build the unsigned executeV1 transaction from a throwaway sender."""
        data = abi.encode_forwarder_call("executeV1", eoa_address, wallet_index, payload, signatures)
        sender = Account.create().address
        return TransactionRequest(data=data, from_address=sender, to=self.forwarder_address)


class AddressResolver:
    """Computes the deterministic wallet address of an owner and index."""

    def __init__(
        self,
        rpc: ChainRpcClient,
        cache: CacheBackend,
        forwarder_address: str,
        ttl: int,
    ):
        self.rpc = rpc
        self.cache = cache
        self.forwarder_address = to_checksum_address(forwarder_address)
        self.ttl = ttl

    async def compute(self, eoa_address: str, index: str = "0", use_cache: bool = True) -> str:
        """Wallet address for (owner, index), identical on every chain.

        Raises:
            UpstreamFailure: the forwarder could not be queried
        """
        key = CacheKeys.avocado_address(eoa_address, index)
        if use_cache:
            cached = await self.cache.get(key)
            if cached:
                return cached

        try:
            async with timed("Avocado address", logger):
                result = await self.rpc.eth_call(
                    self.forwarder_address, abi.encode_compute_avocado(eoa_address, int(index))
                )
            (address,) = abi.decode_result(["address"], result)
        except (RpcError, ValueError) as e:
            raise UpstreamFailure(f"Unable to compute wallet address: {e}") from e

        address = to_checksum_address(address)
        await self.cache.set(key, address, self.ttl)
        return address
