"""Business logic services for the web layer."""

from avoroute.web.services.chain_service import ChainService
from avoroute.web.services.fee_service import FeeService
from avoroute.web.services.sourcing_service import SourcingService

__all__ = [
    "ChainService",
    "FeeService",
    "SourcingService",
]
