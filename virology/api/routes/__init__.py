"""
API routes for the virology token service.

Available routers:
- health: Liveness endpoint
- metrics: Prometheus scrape endpoint
- virology: Test kit ordering, result polling, CTA exchange
"""

from virology.api.routes.health import router as health_router
from virology.api.routes.metrics import router as metrics_router
from virology.api.routes.virology import router as virology_router

__all__: list[str] = ["health_router", "metrics_router", "virology_router"]
