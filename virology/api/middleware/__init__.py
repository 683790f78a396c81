"""HTTP middleware for the virology API."""

from virology.api.middleware.logging_middleware import LoggingMiddleware
from virology.api.middleware.metrics_middleware import MetricsMiddleware

__all__: list[str] = ["LoggingMiddleware", "MetricsMiddleware"]
