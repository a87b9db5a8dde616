"""Chain service for registry metadata."""

import logging
from typing import Optional

from avoroute.chains import ChainProfile, ChainRegistry
from avoroute.web.contracts.chains import ChainInfo, ChainListResponse, TokenInfo

logger = logging.getLogger(__name__)


class ChainService:
    """Read-only view of the supported chains and their tokens."""

    def __init__(self, registry: ChainRegistry):
        self.registry = registry

    def _to_info(self, chain: ChainProfile) -> ChainInfo:
        return ChainInfo(
            chain_id=chain.chain_id,
            name=chain.name,
            native_asset=chain.native_symbol,
            supports_eip1559=chain.supports_eip1559,
            has_l1_fee=chain.has_l1_surcharge or chain.l1_gas_in_limit,
            tokens=[
                TokenInfo(
                    symbol=token.symbol,
                    contract_address=token.contract_address,
                    decimals=token.decimals,
                )
                for token in self.registry.get_tokens(chain.chain_id)
            ],
        )

    def get_supported_chains(self) -> ChainListResponse:
        chains = [self._to_info(chain) for chain in self.registry.get_all_chains()]
        return ChainListResponse(success=True, chains=chains, total=len(chains))

    def get_chain(self, chain_id: int) -> Optional[ChainInfo]:
        chain = self.registry.get_chain(chain_id)
        return self._to_info(chain) if chain else None
