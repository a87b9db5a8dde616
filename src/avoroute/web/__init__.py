"""Web boundary layer.

contracts/   - pydantic request and response models
services/    - adapters from contracts to the routing and fee components
controllers/ - FastAPI routers

Shared components (registry, RPC pool, cache, price feed, route finder)
live in ``app.state`` and are injected per request.
"""

__all__ = [
    "contracts",
    "services",
    "controllers",
]
