"""Chain information API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request

from avoroute.web.contracts.chains import ChainInfo, ChainListResponse
from avoroute.web.services.chain_service import ChainService

router = APIRouter(prefix="/chains", tags=["chains"])


def get_chain_service(request: Request) -> ChainService:
    return ChainService(request.app.state.registry)


@router.get("/", response_model=ChainListResponse)
async def get_chains(service: ChainService = Depends(get_chain_service)) -> ChainListResponse:
    """Get list of supported chains with their stablecoins."""
    return service.get_supported_chains()


@router.get("/{chain_id}", response_model=ChainInfo)
async def get_chain(chain_id: int, service: ChainService = Depends(get_chain_service)) -> ChainInfo:
    """Get information about a specific chain.

    Args:
        chain_id: EVM chain id
    """
    chain = service.get_chain(chain_id)
    if not chain:
        raise HTTPException(status_code=404, detail=f"Chain not found: {chain_id}")
    return chain
