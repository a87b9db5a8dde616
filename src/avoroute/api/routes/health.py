"""Health check endpoints."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "avoroute"}


@router.get("/health/detailed")
async def detailed_health(request: Request):
    """Detailed health check with configuration info."""
    settings = request.app.state.settings
    registry = getattr(request.app.state, "registry", None)
    return {
        "status": "healthy",
        "service": "avoroute",
        "version": "0.1.0",
        "chains": registry.chain_ids if registry else [],
        "config": settings.get_safe_dict(),
    }
