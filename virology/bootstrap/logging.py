"""Bootstrap wiring for logging configuration."""

from __future__ import annotations

import os

from structlog import get_logger

from virology.infrastructure.observability import configure_structlog as _configure_structlog

ENVIRONMENT_VAR = "ENVIRONMENT"
DEFAULT_ENVIRONMENT = "development"


def configure_logging() -> None:
    """Configure structlog from the ENVIRONMENT variable.

    production renders JSON for log aggregation; anything else gets the
    coloured console renderer. Call before any logging occurs.
    """
    environment = os.getenv(ENVIRONMENT_VAR, DEFAULT_ENVIRONMENT)
    _configure_structlog(environment=environment)
    get_logger().bind(component="startup_logging").info(
        "structured_logging_configured", environment=environment
    )


__all__ = ["configure_logging"]
