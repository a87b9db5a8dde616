"""Sourcing route API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError

from avoroute.web.contracts.sourcing import SourcingRouteEntry, SourcingRouteRequest
from avoroute.web.services.sourcing_service import SourcingService

router = APIRouter(tags=["sourcing"])


def get_sourcing_service(request: Request) -> SourcingService:
    return SourcingService(request.app.state.route_finder)


def sourcing_request(
    chain_id: int = Path(..., description="Destination chain id"),
    token: str = Path(..., description="Token symbol"),
    eoa_address: str = Query(..., alias="eoaAddress"),
    amount: str = Query(...),
    avocado_address: Optional[str] = Query(None, alias="avocadoAddress"),
    index: str = Query("0"),
) -> SourcingRouteRequest:
    """Collect path and query parameters into one validated request."""
    try:
        return SourcingRouteRequest(
            chain_id=chain_id,
            token=token.upper(),
            eoa_address=eoa_address,
            amount=amount,
            avocado_address=avocado_address,
            index=index,
        )
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors()) from e


@router.get(
    "/estimate-sourcing-routes/{chain_id}/{token}",
    response_model=list[SourcingRouteEntry],
)
async def estimate_sourcing_routes(
    params: SourcingRouteRequest = Depends(sourcing_request),
    service: SourcingService = Depends(get_sourcing_service),
) -> list[SourcingRouteEntry]:
    """Get the cheapest chains to source a token amount from.

    Every supported chain except the destination is considered. Entries are
    sorted ascending by fee and their amounts add up to the requested amount.
    This is a READ-ONLY operation - nothing is signed or sent.
    """
    return await service.estimate_routes(params)
