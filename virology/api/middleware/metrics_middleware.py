"""Metrics middleware for request instrumentation.

Records request latency and error rates to Prometheus. The exchange
endpoint's latency floor is visible here as a lower bound on its
histogram.
"""

import time
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from virology.bootstrap.metrics import get_metrics_collector

UNMATCHED_ENDPOINT = "unmatched"

_ERROR_TYPES = {
    400: "bad_request",
    404: "not_found",
    409: "conflict",
    422: "unprocessable_entity",
    500: "internal_error",
    503: "service_unavailable",
}


def _endpoint_label(request: Request) -> str:
    """Route template the request matched, or UNMATCHED_ENDPOINT.

    Raw paths are never used as label values, so unknown URLs cannot
    create new series.
    """
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path if isinstance(path, str) else UNMATCHED_ENDPOINT


def _classify_error_type(status_code: int) -> str:
    """Classify an HTTP error status code.

    Args:
        status_code: HTTP status code.

    Returns:
        Error type classification string.
    """
    if status_code in _ERROR_TYPES:
        return _ERROR_TYPES[status_code]
    if 400 <= status_code < 500:
        return "client_error"
    if status_code >= 500:
        return "server_error"
    return "unknown"


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to record HTTP request metrics.

    Records:
    - Request duration (histogram)
    - Total requests (counter)
    - Failed requests (counter for 4xx/5xx)
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        method = request.method
        endpoint = _endpoint_label(request)
        status = str(response.status_code)

        collector = get_metrics_collector()
        collector.observe_request_duration(
            method=method, endpoint=endpoint, duration=duration
        )
        collector.increment_requests(method=method, endpoint=endpoint, status=status)
        if response.status_code >= 400:
            collector.increment_failed_requests(
                method=method,
                endpoint=endpoint,
                status=status,
                error_type=_classify_error_type(response.status_code),
            )
        return response
