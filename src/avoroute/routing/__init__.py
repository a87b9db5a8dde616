"""Route selection and sourcing orchestration."""

from avoroute.routing.finder import RouteFinder, build_sourcing_actions
from avoroute.routing.optimizer import RouteOptimizer

__all__ = [
    "RouteFinder",
    "RouteOptimizer",
    "build_sourcing_actions",
]
