"""Fee estimation API endpoints."""

from fastapi import APIRouter, Depends, Request, Response

from avoroute.web.contracts.fees import FeeEstimateRequest, FeeEstimateResponse
from avoroute.web.services.fee_service import FeeService

router = APIRouter(tags=["fees"])


def get_fee_service(request: Request) -> FeeService:
    return FeeService(request.app.state.route_finder)


@router.post(
    "/estimate-fees-with-actions",
    response_model=FeeEstimateResponse,
    responses={204: {"description": "Fee could not be estimated"}},
)
async def estimate_fees_with_actions(
    request: FeeEstimateRequest,
    service: FeeService = Depends(get_fee_service),
):
    """Estimate the fee of casting a set of actions on one chain.

    Returns 204 when the chain could not produce a quote.
    """
    response = await service.estimate_fees(request)
    if response is None:
        return Response(status_code=204)
    return response
