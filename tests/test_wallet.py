"""Tests for wallet access, address resolution and balances."""

from decimal import Decimal

import pytest
from eth_utils import is_address

from avoroute.cache import CacheKeys
from avoroute.chains import CHAINS, ChainRegistry
from avoroute.errors import (
    MetadataUnavailableError,
    RpcTransportError,
    SimulationFailedError,
    UpstreamFailure,
)
from avoroute.fees.estimator import mock_signatures
from avoroute.models import TransactionAction, prepare_payload
from avoroute.wallet.avocado import SIMULATION_SENDER, AddressResolver, AvocadoWallet
from avoroute.wallet.balances import BalanceProvider
from conftest import (
    EOA_ADDRESS,
    EXECUTE_SIGNATURE,
    SIMULATE_SIGNATURE,
    WALLET_ADDRESS,
    FakeRpcPool,
    healthy_rpc,
    selector,
    simulation_result,
    usdc,
)

PAYLOAD = prepare_payload(
    [TransactionAction(target="0x3333333333333333333333333333333333333333", data="0x0001")], "0"
)


@pytest.fixture
def polygon(registry):
    return registry.require_chain(137)


@pytest.fixture
def rpc(polygon):
    return healthy_rpc(polygon, signers=2, nonce=7)


@pytest.fixture
def wallet(polygon, rpc, cache, settings):
    return AvocadoWallet(polygon, WALLET_ADDRESS, rpc, cache, settings.avo_forwarder_address)


class TestWalletMetadata:
    """Tests for signer count and nonce reads."""

    @pytest.mark.asyncio
    async def test_reads_and_caches(self, wallet, cache):
        metadata = await wallet.get_wallet_metadata()

        assert metadata.required_signers == 2
        assert metadata.next_nonce == "7"
        assert await cache.get(CacheKeys.required_signers(137, WALLET_ADDRESS)) == "2"
        assert await cache.get(CacheKeys.wallet_nonce(137, WALLET_ADDRESS)) == "7"

    @pytest.mark.asyncio
    async def test_cached_values_skip_rpc(self, wallet, rpc, cache):
        await cache.set(CacheKeys.required_signers(137, WALLET_ADDRESS), "3")
        await cache.set(CacheKeys.wallet_nonce(137, WALLET_ADDRESS), "11")

        metadata = await wallet.get_wallet_metadata()

        assert (metadata.required_signers, metadata.next_nonce) == (3, "11")
        assert rpc.calls == []

    @pytest.mark.asyncio
    async def test_cache_bypass(self, wallet, rpc, cache):
        await cache.set(CacheKeys.required_signers(137, WALLET_ADDRESS), "3")

        metadata = await wallet.get_wallet_metadata(use_cache=False)

        assert metadata.required_signers == 2
        assert len(rpc.called("requiredSigners()")) == 1

    @pytest.mark.asyncio
    async def test_undeployed_wallet_falls_back(self, polygon, cache, settings):
        """Reverting reads give one signer and nonce 0, written back to the cache."""
        rpc = healthy_rpc(polygon)
        rpc.handlers.pop(selector("requiredSigners()"))
        rpc.handlers.pop(selector("avoNonce()"))
        wallet = AvocadoWallet(polygon, WALLET_ADDRESS, rpc, cache, settings.avo_forwarder_address)

        metadata = await wallet.get_wallet_metadata(required=True)

        assert (metadata.required_signers, metadata.next_nonce) == (1, "0")
        assert await cache.get(CacheKeys.required_signers(137, WALLET_ADDRESS)) == "1"
        assert await cache.get(CacheKeys.wallet_nonce(137, WALLET_ADDRESS)) == "0"

    @pytest.mark.asyncio
    async def test_empty_return_data_falls_back(self, wallet, rpc):
        rpc.on("requiredSigners()", "0x")

        assert (await wallet.get_wallet_metadata()).required_signers == 1

    @pytest.mark.asyncio
    async def test_transport_failure_when_required(self, wallet, rpc, cache):
        rpc.on("requiredSigners()", RpcTransportError("connection refused", chain_id=137))

        with pytest.raises(MetadataUnavailableError) as exc:
            await wallet.get_wallet_metadata(use_cache=False, required=True)

        assert exc.value.chain_id == 137
        assert exc.value.http_status == 500
        assert await cache.get(CacheKeys.required_signers(137, WALLET_ADDRESS)) == "1"

    @pytest.mark.asyncio
    async def test_transport_failure_when_optional(self, wallet, rpc):
        rpc.on("requiredSigners()", RpcTransportError("connection refused", chain_id=137))

        metadata = await wallet.get_wallet_metadata(use_cache=False)

        assert metadata.required_signers == 1
        assert metadata.next_nonce == "7"


class TestSimulation:
    """Tests for forwarder simulation and transaction population."""

    @pytest.mark.asyncio
    async def test_simulation_result(self, wallet, rpc, settings):
        rpc.on(SIMULATE_SIGNATURE, simulation_result(cast_gas=80_000, deployment_gas=120_000, is_deployed=False))

        result = await wallet.simulate_transaction(EOA_ADDRESS, 0, mock_signatures(2), PAYLOAD)

        assert result.cast_gas_used == 80_000
        assert result.deployment_gas_used == 120_000
        assert result.is_deployed is False
        (to, _, sender) = rpc.called(SIMULATE_SIGNATURE)[0]
        assert to.lower() == settings.avo_forwarder_address.lower()
        assert sender == SIMULATION_SENDER

    @pytest.mark.asyncio
    async def test_simulation_failure(self, wallet, rpc):
        rpc.on(SIMULATE_SIGNATURE, simulation_result(success=False, reason="AvocadoMultisig__InsufficientBalance"))

        with pytest.raises(SimulationFailedError) as exc:
            await wallet.simulate_transaction(EOA_ADDRESS, 0, mock_signatures(1), PAYLOAD)
        assert "InsufficientBalance" in exc.value.message

    def test_transaction_request(self, wallet, settings):
        tx = wallet.get_transaction_request(EOA_ADDRESS, 0, mock_signatures(1), PAYLOAD)

        assert tx.data.startswith(selector(EXECUTE_SIGNATURE))
        assert tx.to.lower() == settings.avo_forwarder_address.lower()
        assert is_address(tx.from_address)

    def test_mock_signature_count(self):
        assert len(mock_signatures(3)) == 3
        assert len(mock_signatures(0)) == 1
        assert mock_signatures(1)[0].signature == "0x" + "ff" * 65

    @pytest.mark.asyncio
    async def test_is_deployed(self, wallet, rpc):
        assert await wallet.is_deployed() is True
        rpc.code = "0x"
        assert await wallet.is_deployed() is False


class TestAddressResolver:
    """Tests for counterfactual wallet address resolution."""

    @pytest.mark.asyncio
    async def test_compute_and_cache(self, polygon, cache, settings):
        rpc = healthy_rpc(polygon)
        resolver = AddressResolver(rpc, cache, settings.avo_forwarder_address, ttl=60)

        assert await resolver.compute(EOA_ADDRESS, "0") == WALLET_ADDRESS
        assert await resolver.compute(EOA_ADDRESS, "0") == WALLET_ADDRESS
        assert len(rpc.called("computeAvocado(address,uint32)")) == 1
        assert await cache.get(CacheKeys.avocado_address(EOA_ADDRESS, "0")) == WALLET_ADDRESS

        await resolver.compute(EOA_ADDRESS, "0", use_cache=False)
        assert len(rpc.called("computeAvocado(address,uint32)")) == 2

    @pytest.mark.asyncio
    async def test_failure(self, polygon, cache, settings):
        rpc = healthy_rpc(polygon)
        rpc.handlers.pop(selector("computeAvocado(address,uint32)"))
        resolver = AddressResolver(rpc, cache, settings.avo_forwarder_address, ttl=60)

        with pytest.raises(UpstreamFailure):
            await resolver.compute(EOA_ADDRESS, "1")


class TestBalanceProvider:
    """Tests for token balance reads."""

    @pytest.mark.asyncio
    async def test_balance_in_token_units(self, registry, polygon):
        pool = FakeRpcPool({137: healthy_rpc(polygon, balance=usdc("40.5"))})
        result = await BalanceProvider(registry, pool).get_balance(137, "usdc", WALLET_ADDRESS)

        assert result.ok
        assert result.value.amount == Decimal("40.5")
        assert result.value.chain_id == 137

    @pytest.mark.asyncio
    async def test_zero_balance_is_unavailable(self, registry, polygon):
        pool = FakeRpcPool({137: healthy_rpc(polygon, balance=0)})
        result = await BalanceProvider(registry, pool).get_balance(137, "USDC", WALLET_ADDRESS)

        assert not result.ok

    @pytest.mark.asyncio
    async def test_rpc_failure_is_unavailable(self, registry, polygon):
        rpc = healthy_rpc(polygon)
        rpc.on("balanceOf(address)", RpcTransportError("timeout", chain_id=137))
        result = await BalanceProvider(registry, FakeRpcPool({137: rpc})).get_balance(137, "USDT", WALLET_ADDRESS)

        assert not result.ok
        assert "timeout" in result.reason

    @pytest.mark.asyncio
    async def test_unexpected_error_is_unavailable(self, registry, polygon):
        rpc = healthy_rpc(polygon)
        rpc.on("balanceOf(address)", TypeError("unexpected payload"))
        result = await BalanceProvider(registry, FakeRpcPool({137: rpc})).get_balance(137, "USDC", WALLET_ADDRESS)

        assert not result.ok
        assert "TypeError" in result.reason

    @pytest.mark.asyncio
    async def test_unsupported_token(self, polygon):
        registry = ChainRegistry(CHAINS, {})
        rpc = healthy_rpc(polygon, balance=usdc(10))
        result = await BalanceProvider(registry, FakeRpcPool({137: rpc})).get_balance(137, "USDC", WALLET_ADDRESS)

        assert not result.ok
        assert rpc.calls == []
