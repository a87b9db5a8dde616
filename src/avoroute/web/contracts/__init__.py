"""Request and response contracts for the web layer.

These Pydantic models define the API interface for web clients.
JSON field names are camelCase.
"""

from avoroute.web.contracts.chains import ChainInfo, ChainListResponse, TokenInfo
from avoroute.web.contracts.fees import ActionInput, FeeEstimateRequest, FeeEstimateResponse
from avoroute.web.contracts.sourcing import SourcingRouteEntry, SourcingRouteRequest

__all__ = [
    # Sourcing contracts
    "SourcingRouteRequest",
    "SourcingRouteEntry",
    # Fee contracts
    "ActionInput",
    "FeeEstimateRequest",
    "FeeEstimateResponse",
    # Chain contracts
    "ChainInfo",
    "ChainListResponse",
    "TokenInfo",
]
