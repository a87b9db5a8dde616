"""Sourcing service for route estimates.

Thin adapter between the HTTP contracts and the RouteFinder.
"""

import logging

from avoroute.routing.finder import RouteFinder
from avoroute.web.contracts.sourcing import SourcingRouteEntry, SourcingRouteRequest

logger = logging.getLogger(__name__)


class SourcingService:
    """Service for cross-chain sourcing routes."""

    def __init__(self, route_finder: RouteFinder):
        self.route_finder = route_finder

    async def estimate_routes(
        self, request: SourcingRouteRequest, use_cache: bool = True
    ) -> list[SourcingRouteEntry]:
        """Cheapest set of chains to source ``request.amount`` from.

        Errors propagate to the API exception handlers.
        """
        entries = await self.route_finder.find_routes(
            chain_id=request.chain_id,
            token_symbol=request.token.value,
            eoa_address=request.eoa_address,
            amount=request.amount,
            wallet_address=request.avocado_address,
            index=request.index,
            use_cache=use_cache,
        )
        logger.info(
            f"Sourcing plan for {request.amount} {request.token.value} on {request.chain_id}: "
            f"{[e.chain_id for e in entries]}"
        )
        return [SourcingRouteEntry.from_entry(e) for e in entries]
