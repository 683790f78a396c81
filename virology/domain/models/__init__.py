"""Domain models for the virology token service.

Contains the test order entity, its enumerations and the outcome value
objects returned by the services. These models are immutable and
contain no infrastructure dependencies.
"""

from virology.domain.models.outcomes import (
    ExchangeOutcome,
    ExchangeStatus,
    LookupOutcome,
    LookupStatus,
    TestOrderResponse,
)
from virology.domain.models.test_order import (
    Country,
    TestKit,
    TestOrder,
    TestOrderStatus,
    TestResult,
    VirologyRequestType,
)

__all__: list[str] = [
    "Country",
    "ExchangeOutcome",
    "ExchangeStatus",
    "LookupOutcome",
    "LookupStatus",
    "TestKit",
    "TestOrder",
    "TestOrderResponse",
    "TestOrderStatus",
    "TestResult",
    "VirologyRequestType",
]
