"""Tests for the fee estimation service."""

from dataclasses import replace
from decimal import Decimal

import pytest

from avoroute.cache import InMemoryCache
from avoroute.errors import MetadataUnavailableError, PriceUnavailableError, RpcTransportError, SimulationFailedError
from avoroute.fees.estimator import FeeEstimator
from avoroute.models import FeeData, TransactionAction
from avoroute.rpc import abi
from avoroute.wallet.avocado import AvocadoWallet
from conftest import EOA_ADDRESS, SIMULATE_SIGNATURE, WALLET_ADDRESS, FakePriceFeed, healthy_rpc, simulation_result

ACTIONS = [TransactionAction(target="0x3333333333333333333333333333333333333333", data="0x0001")]


def make_estimator(chain, rpc, cache, settings, prices=None, timeout=None) -> FeeEstimator:
    wallet = AvocadoWallet(chain, WALLET_ADDRESS, rpc, cache, settings.avo_forwarder_address)
    return FeeEstimator(
        wallet=wallet,
        eoa_address=EOA_ADDRESS,
        wallet_index=0,
        price_feed=FakePriceFeed(prices),
        tuning=settings.gas_tuning(),
        timeout=timeout,
    )


class TestFeeEstimator:
    """Tests for FeeEstimator.estimate."""

    @pytest.mark.asyncio
    async def test_legacy_chain_quote(self, registry, cache, settings):
        """Polygon: multiplier is 105 * 120 in basis points of 8000."""
        chain = registry.require_chain(137)
        rpc = healthy_rpc(chain, fee_data=FeeData(gas_price=10**11))

        result = await make_estimator(chain, rpc, cache, settings, {137: "0.5"}).estimate(ACTIONS)

        assert result.ok
        quote = result.value
        assert quote.chain_id == 137
        assert quote.chain_name == chain.name
        assert quote.multiplier == 15_750
        assert quote.fee > 10**14

    @pytest.mark.asyncio
    async def test_eip1559_chain_quote(self, registry, cache, settings):
        """Ethereum: multiplier derived from max fee over base plus priority fee."""
        chain = registry.require_chain(1)
        rpc = healthy_rpc(chain, fee_data=FeeData(max_priority_fee_per_gas=2 * 10**9, last_base_fee_per_gas=10**11))

        result = await make_estimator(chain, rpc, cache, settings, {1: "2000"}).estimate(ACTIONS)

        assert result.ok
        assert result.value.multiplier == 19_565

    @pytest.mark.asyncio
    async def test_fee_scales_with_native_price(self, registry, cache, settings):
        chain = registry.require_chain(43114)

        cheap = await make_estimator(chain, healthy_rpc(chain), cache, settings, {43114: "10"}).estimate(ACTIONS)
        dear = await make_estimator(chain, healthy_rpc(chain), cache, settings, {43114: "20"}).estimate(ACTIONS)

        ratio = Decimal(dear.value.fee) / Decimal(cheap.value.fee)
        assert Decimal("1.99") < ratio < Decimal("2.01")

    @pytest.mark.asyncio
    async def test_l1_data_fee_added_on_optimism(self, registry, cache, settings):
        chain = registry.require_chain(10)
        without_surcharge = replace(chain, has_l1_surcharge=False)
        fee_data = FeeData(gas_price=10**9)

        with_l1 = await make_estimator(chain, healthy_rpc(chain, fee_data=fee_data), cache, settings).estimate(ACTIONS)
        without_l1 = await make_estimator(
            without_surcharge, healthy_rpc(without_surcharge, fee_data=fee_data), cache, settings
        ).estimate(ACTIONS)

        assert with_l1.value.fee > without_l1.value.fee

    @pytest.mark.asyncio
    async def test_arbitrum_queries_node_interface(self, registry, cache, settings):
        chain = registry.require_chain(42161)
        rpc = healthy_rpc(chain)

        result = await make_estimator(chain, rpc, cache, settings).estimate(ACTIONS)

        assert result.ok
        assert any(call[0] == abi.ARB_NODE_INTERFACE for call in rpc.calls)
        # gas limit multiplier 3.0 (v1 wallet) * price multiplier 120
        assert result.value.multiplier == 45_000

    @pytest.mark.asyncio
    async def test_flashloan_costs_more(self, registry, cache, settings):
        chain = registry.require_chain(137)
        estimator = make_estimator(chain, healthy_rpc(chain), cache, settings, {137: "100"})

        plain = await estimator.estimate(ACTIONS)
        flashloan = await estimator.estimate(ACTIONS, action_id="21")

        assert flashloan.value.fee > plain.value.fee

    @pytest.mark.asyncio
    async def test_more_signers_cost_more(self, registry, cache, settings):
        chain = registry.require_chain(137)

        single = await make_estimator(
            chain, healthy_rpc(chain, signers=1), cache, settings, {137: "100"}
        ).estimate(ACTIONS)
        cache_for_multisig = InMemoryCache()
        multisig = await make_estimator(
            chain, healthy_rpc(chain, signers=4), cache_for_multisig, settings, {137: "100"}
        ).estimate(ACTIONS)

        assert multisig.value.fee > single.value.fee


class TestSoftFailures:
    """Tests for unavailable results and strict mode."""

    @pytest.mark.asyncio
    async def test_simulation_failure_is_unavailable(self, registry, cache, settings):
        chain = registry.require_chain(137)
        rpc = healthy_rpc(chain)
        rpc.on(SIMULATE_SIGNATURE, simulation_result(success=False, reason="boom"))

        result = await make_estimator(chain, rpc, cache, settings).estimate(ACTIONS)

        assert not result.ok
        assert "boom" in result.reason

    @pytest.mark.asyncio
    async def test_strict_mode_propagates(self, registry, cache, settings):
        chain = registry.require_chain(137)
        rpc = healthy_rpc(chain)
        rpc.on(SIMULATE_SIGNATURE, simulation_result(success=False, reason="boom"))

        with pytest.raises(SimulationFailedError):
            await make_estimator(chain, rpc, cache, settings).estimate(ACTIONS, strict=True)

    @pytest.mark.asyncio
    async def test_price_failure_is_unavailable(self, registry, cache, settings):
        chain = registry.require_chain(137)
        prices = {137: PriceUnavailableError("no price")}

        result = await make_estimator(chain, healthy_rpc(chain), cache, settings, prices).estimate(ACTIONS)

        assert not result.ok
        assert "no price" in result.reason

    @pytest.mark.asyncio
    async def test_fee_data_failure_is_unavailable(self, registry, cache, settings):
        chain = registry.require_chain(137)
        rpc = healthy_rpc(chain)
        rpc.fee_data = RpcTransportError("gas price unavailable", chain_id=137)

        result = await make_estimator(chain, rpc, cache, settings).estimate(ACTIONS)

        assert not result.ok

    @pytest.mark.asyncio
    async def test_timeout_is_unavailable(self, registry, cache, settings):
        chain = registry.require_chain(137)
        rpc = healthy_rpc(chain)
        rpc.fee_data_delay = 1.0

        result = await make_estimator(chain, rpc, cache, settings, timeout=0.05).estimate(ACTIONS)

        assert not result.ok
        assert result.reason == "timeout"

    @pytest.mark.asyncio
    async def test_required_metadata_failure_propagates(self, registry, cache, settings):
        """Unreadable metadata is fatal when required, even outside strict mode."""
        chain = registry.require_chain(137)
        rpc = healthy_rpc(chain)
        rpc.on("avoNonce()", RpcTransportError("connection reset", chain_id=137))

        with pytest.raises(MetadataUnavailableError):
            await make_estimator(chain, rpc, cache, settings).estimate(ACTIONS, require_metadata=True)

    @pytest.mark.asyncio
    async def test_optional_metadata_failure_falls_back(self, registry, cache, settings):
        chain = registry.require_chain(137)
        rpc = healthy_rpc(chain)
        rpc.on("avoNonce()", RpcTransportError("connection reset", chain_id=137))

        result = await make_estimator(chain, rpc, cache, settings).estimate(ACTIONS)

        assert result.ok

    @pytest.mark.asyncio
    async def test_unexpected_error_is_unavailable(self, registry, cache, settings):
        """Errors outside the service hierarchy still only drop the chain."""
        chain = registry.require_chain(43114)
        rpc = healthy_rpc(chain)
        rpc.fee_data = TypeError("int() can't convert non-string with explicit base")

        result = await make_estimator(chain, rpc, cache, settings).estimate(ACTIONS)

        assert not result.ok
        assert result.reason.startswith("TypeError")

    @pytest.mark.asyncio
    async def test_unexpected_error_in_strict_mode(self, registry, cache, settings):
        chain = registry.require_chain(43114)
        rpc = healthy_rpc(chain)
        rpc.fee_data = TypeError("bad fee data")

        with pytest.raises(TypeError):
            await make_estimator(chain, rpc, cache, settings).estimate(ACTIONS, strict=True)
