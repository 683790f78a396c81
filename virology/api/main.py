"""FastAPI application entry point for the virology token service."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from structlog import get_logger

from virology import __version__
from virology.api.middleware import LoggingMiddleware, MetricsMiddleware
from virology.api.routes import health_router, metrics_router, virology_router
from virology.bootstrap.database import close_database_engine
from virology.bootstrap.logging import configure_logging
from virology.bootstrap.metrics import get_metrics_collector
from virology.bootstrap.test_order_store import get_test_order_store
from virology.domain.errors import (
    ConfigurationError,
    StoreUnavailableError,
    TokenSpaceExhaustedError,
)
from virology.infrastructure.adapters.persistence import PostgresTestOrderStore

logger = get_logger()

SERVICE_NAME = "virology-api"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging, prepare the store and record startup."""
    configure_logging()
    store = get_test_order_store()
    if isinstance(store, PostgresTestOrderStore):
        await store.create_schema()
    get_metrics_collector().record_startup(SERVICE_NAME)
    logger.info("virology_api_started", version=__version__)
    yield
    await close_database_engine()
    logger.info("virology_api_stopped")


def _problem_response(
    request: Request, status: int, type_: str, title: str, detail: str
) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={
            "type": type_,
            "title": title,
            "status": status,
            "detail": detail,
            "instance": str(request.url),
        },
        media_type="application/problem+json",
    )


async def token_space_exhausted_handler(
    request: Request, exc: TokenSpaceExhaustedError
) -> JSONResponse:
    # Already logged critical and counted by TestOrderService
    return _problem_response(
        request,
        500,
        "urn:virology:token-space-exhausted",
        "Token Space Exhausted",
        "Unable to issue a test order, please try again later",
    )


async def store_unavailable_handler(
    request: Request, exc: StoreUnavailableError
) -> JSONResponse:
    logger.error(
        "test_order_store_unavailable",
        operation=exc.operation,
        reason=exc.reason,
        path=request.url.path,
    )
    return _problem_response(
        request,
        503,
        "urn:virology:store-unavailable",
        "Service Unavailable",
        "The test order store is temporarily unavailable",
    )


async def configuration_error_handler(
    request: Request, exc: ConfigurationError
) -> JSONResponse:
    logger.critical("virology_configuration_error", key=exc.key, error=str(exc))
    return _problem_response(
        request,
        500,
        "urn:virology:configuration-error",
        "Configuration Error",
        "The service is not configured correctly",
    )


def create_app() -> FastAPI:
    """Build the FastAPI application.

    Environment variables from a local .env file are loaded first;
    variables already set in the process take precedence.
    """
    load_dotenv()

    app = FastAPI(
        title="Virology Token Service",
        description="Issues, tracks and redeems single-use virology test tokens",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(TokenSpaceExhaustedError, token_space_exhausted_handler)
    app.add_exception_handler(StoreUnavailableError, store_unavailable_handler)
    app.add_exception_handler(ConfigurationError, configuration_error_handler)

    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(virology_router)
    return app


app = create_app()
