"""Observability infrastructure for structured logging and correlation.

Usage:
    from virology.infrastructure.observability import (
        configure_structlog,
        get_correlation_id,
        set_correlation_id,
    )
"""

from virology.infrastructure.observability.correlation import (
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from virology.infrastructure.observability.logging import configure_structlog

__all__: list[str] = [
    "configure_structlog",
    "correlation_id_processor",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
]
