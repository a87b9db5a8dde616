"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from avoroute.api.handlers import register_exception_handlers
from avoroute.cache import create_cache
from avoroute.chains import ChainRegistry
from avoroute.config import Settings, get_settings
from avoroute.fees.prices import NativeTokenPriceFeed
from avoroute.routing.finder import RouteFinder
from avoroute.rpc.client import RpcPool

logger = logging.getLogger(__name__)


def normalize_prefix(prefix: str) -> str:
    """'api/' -> '/api', '' -> ''."""
    prefix = (prefix or "").strip().rstrip("/")
    if prefix and not prefix.startswith("/"):
        prefix = "/" + prefix
    return prefix


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    settings: Settings = app.state.settings
    registry = ChainRegistry.from_settings(settings)
    rpc_pool = RpcPool(registry, timeout=settings.rpc_timeout_seconds)
    cache = create_cache(settings.redis_url)
    price_feed = NativeTokenPriceFeed(settings.price_api_url, timeout=settings.price_timeout_seconds)

    app.state.registry = registry
    app.state.route_finder = RouteFinder(registry, rpc_pool, cache, price_feed, settings)
    logger.info(f"Serving {len(registry.chain_ids)} chains: {registry.chain_ids}")

    yield

    # Shutdown
    await rpc_pool.close()
    await price_feed.close()
    await cache.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="AvoRoute API",
        description="Cross-chain stablecoin sourcing and fee estimation",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Register routes
    from avoroute.api.routes import health
    from avoroute.web.controllers import chains_router, fees_router, sourcing_router

    prefix = normalize_prefix(settings.path_prefix)
    app.include_router(health.router, tags=["Health"])
    app.include_router(chains_router)
    app.include_router(sourcing_router, prefix=prefix)
    app.include_router(fees_router, prefix=prefix)

    return app


# Default app instance
app = create_app()
