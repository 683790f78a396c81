"""Application services for the virology token lifecycle."""

from virology.application.services.cta_exchange_service import CtaExchangeService
from virology.application.services.result_lookup_service import ResultLookupService
from virology.application.services.test_order_service import TestOrderService
from virology.application.services.test_result_service import TestResultService
from virology.application.services.throttling_service import (
    Throttle,
    ThrottledCtaExchangeService,
)

__all__: list[str] = [
    "CtaExchangeService",
    "ResultLookupService",
    "TestOrderService",
    "TestResultService",
    "Throttle",
    "ThrottledCtaExchangeService",
]
