"""Error types for sourcing and fee estimation.

Errors carrying an ``http_status`` are converted to
``{"status": "failure", "message": ...}`` responses by the API layer.
Per-chain errors (RPC, simulation, price) are absorbed by the estimator
and balance provider unless strict mode is requested.
"""

from typing import Optional


class AvoRouteError(Exception):
    """Base class for all service errors."""

    http_status: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AvoRouteError):
    """Malformed or missing request fields."""

    http_status = 400


class InsufficientBalanceError(AvoRouteError):
    """Requested amount exceeds the total available across eligible chains."""

    http_status = 400

    def __init__(self, message: str = "You dont have enough balance to source"):
        super().__init__(message)


class ChainUnavailableError(AvoRouteError):
    """A chain's balance or fee lookup failed.

    Only surfaced to the client when every chain failed.
    """

    http_status = 503

    def __init__(self, message: str, chain_id: Optional[int] = None):
        super().__init__(message)
        self.chain_id = chain_id


class UpstreamFailure(AvoRouteError):
    """Required upstream data could not be obtained."""

    http_status = 500


class MetadataUnavailableError(UpstreamFailure):
    """Wallet metadata of a required chain could not be read."""

    def __init__(self, chain_id: int, reason: str):
        super().__init__(f"Wallet metadata unavailable on chain {chain_id}: {reason}")
        self.chain_id = chain_id


class RpcError(AvoRouteError):
    """JSON-RPC transport failure or error response."""

    def __init__(self, message: str, chain_id: Optional[int] = None, code: Optional[int] = None):
        super().__init__(message)
        self.chain_id = chain_id
        self.code = code


class RpcTransportError(RpcError):
    """The RPC endpoint could not be reached or timed out."""


class SimulationFailedError(AvoRouteError):
    """Forwarder simulation reported an unsuccessful execution."""


class PriceUnavailableError(AvoRouteError):
    """Native token price could not be fetched."""
