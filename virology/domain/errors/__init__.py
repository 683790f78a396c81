"""Domain errors for the virology token service.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from VirologyError.
"""

from virology.domain.errors.configuration import ConfigurationError
from virology.domain.errors.state_transition import InvalidStateTransitionError
from virology.domain.errors.store import StoreUnavailableError
from virology.domain.errors.test_order import (
    ResultAlreadyPostedError,
    TestOrderNotFoundError,
    TokenSpaceExhaustedError,
)

__all__: list[str] = [
    "ConfigurationError",
    "InvalidStateTransitionError",
    "ResultAlreadyPostedError",
    "StoreUnavailableError",
    "TestOrderNotFoundError",
    "TokenSpaceExhaustedError",
]
