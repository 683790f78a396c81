"""Application ports: interfaces the services depend on."""

from virology.application.ports.test_order_store import (
    ConditionalUpdateResult,
    CreateResult,
    TestOrderStoreProtocol,
    UpdateStatus,
)
from virology.application.ports.time_authority import TimeAuthorityProtocol
from virology.application.ports.token_generator import TokenGeneratorProtocol

__all__: list[str] = [
    "ConditionalUpdateResult",
    "CreateResult",
    "TestOrderStoreProtocol",
    "TimeAuthorityProtocol",
    "TokenGeneratorProtocol",
    "UpdateStatus",
]
