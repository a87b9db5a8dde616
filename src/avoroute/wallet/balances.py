"""Stablecoin balances of a wallet across chains."""

import logging
from decimal import Decimal

from avoroute.chains import ChainRegistry
from avoroute.errors import AvoRouteError
from avoroute.models import Balance
from avoroute.result import ChainResult
from avoroute.rpc import abi
from avoroute.rpc.client import RpcPool
from avoroute.utils.timing import timed

logger = logging.getLogger(__name__)


class BalanceProvider:
    """Reads ERC-20 balances through the per-chain RPC clients."""

    def __init__(self, registry: ChainRegistry, rpc_pool: RpcPool):
        self.registry = registry
        self.rpc_pool = rpc_pool

    async def get_balance(self, chain_id: int, token_symbol: str, address: str) -> ChainResult[Balance]:
        """Get the token balance of ``address`` on one chain.

        Unsupported tokens, empty balances and failed reads all come back as
        unavailable results so one chain never fails the whole request.
        """
        token = self.registry.get_token(chain_id, token_symbol)
        if token is None:
            return ChainResult.unavailable(chain_id, f"{token_symbol} not supported on chain {chain_id}")

        try:
            async with timed(f"Balance {token.symbol}: {chain_id}", logger):
                raw = await self.rpc_pool.get(chain_id).eth_call(
                    token.contract_address, abi.encode_balance_of(address)
                )
            (amount_raw,) = abi.decode_result(["uint256"], raw)
        except (AvoRouteError, ValueError) as e:
            logger.warning(f"Balance lookup failed on chain {chain_id}: {e}")
            return ChainResult.unavailable(chain_id, str(e))
        except Exception as e:
            logger.exception(f"Unexpected balance lookup error on chain {chain_id}: {e}")
            return ChainResult.unavailable(chain_id, f"{type(e).__name__}: {e}")

        if amount_raw == 0:
            return ChainResult.unavailable(chain_id, "zero balance")

        amount = Decimal(amount_raw) / Decimal(10**token.decimals)
        return ChainResult.success(chain_id, Balance(chain_id=int(chain_id), amount=amount))
