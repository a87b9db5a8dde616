"""Fee service for estimating arbitrary action sets."""

import logging
from typing import Optional

from avoroute.errors import ValidationError
from avoroute.routing.finder import RouteFinder
from avoroute.web.contracts.fees import FeeEstimateRequest, FeeEstimateResponse

logger = logging.getLogger(__name__)


class FeeService:
    """Service for single-chain fee quotes."""

    def __init__(self, route_finder: RouteFinder):
        self.route_finder = route_finder

    async def estimate_fees(
        self, request: FeeEstimateRequest, use_cache: bool = True
    ) -> Optional[FeeEstimateResponse]:
        """Quote the fee of casting ``request.actions``.

        Returns None when the estimation could not be completed. Unreadable
        wallet metadata raises MetadataUnavailableError.
        """
        if self.route_finder.registry.get_chain(request.chain_id) is None:
            raise ValidationError(f"Unsupported chain: {request.chain_id}")

        wallet_address = await self.route_finder.resolve_wallet_address(
            request.eoa_address,
            request.avocado_wallet_index,
            request.avocado_address,
            use_cache,
        )
        estimator = self.route_finder.fee_estimator(
            request.chain_id,
            wallet_address,
            request.eoa_address,
            int(request.avocado_wallet_index),
            use_cache,
        )
        result = await estimator.estimate(
            [action.to_action() for action in request.actions],
            strict=False,
            require_metadata=True,
        )

        if not result.ok:
            logger.info(f"No fee quote on chain {request.chain_id}: {result.reason}")
            return None
        return FeeEstimateResponse.from_quote(result.value)
