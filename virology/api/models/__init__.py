"""API request/response models."""

from virology.api.models.health import HealthResponse
from virology.api.models.virology import (
    CtaExchangeRequest,
    CtaExchangeResponse,
    HomeKitOrderResponse,
    HomeKitRegisterResponse,
    ResultLookupRequest,
    ResultLookupResponse,
    ResultUploadRequest,
    VirologyErrorResponse,
)

__all__: list[str] = [
    "CtaExchangeRequest",
    "CtaExchangeResponse",
    "HealthResponse",
    "HomeKitOrderResponse",
    "HomeKitRegisterResponse",
    "ResultLookupRequest",
    "ResultLookupResponse",
    "ResultUploadRequest",
    "VirologyErrorResponse",
]
