"""HTTP controllers for web API endpoints.

All operations are read-only estimates: nothing is signed or broadcast.
"""

from avoroute.web.controllers.chains import router as chains_router
from avoroute.web.controllers.fees import router as fees_router
from avoroute.web.controllers.sourcing import router as sourcing_router

__all__ = [
    "chains_router",
    "fees_router",
    "sourcing_router",
]
