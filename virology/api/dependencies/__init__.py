"""API dependencies for dependency injection."""

from virology.api.dependencies.virology import (
    get_cta_exchange_service,
    get_exchange_throttle,
    get_result_lookup_service,
    get_test_order_service,
    get_test_result_service,
    get_throttled_cta_exchange_service,
    reset_virology_dependencies,
)

__all__: list[str] = [
    "get_cta_exchange_service",
    "get_exchange_throttle",
    "get_result_lookup_service",
    "get_test_order_service",
    "get_test_result_service",
    "get_throttled_cta_exchange_service",
    "reset_virology_dependencies",
]
