"""State transition errors for the test order lifecycle.

A test order only moves PENDING -> AVAILABLE -> CONSUMED. CONSUMED is
terminal.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from virology.domain.exceptions import VirologyError

if TYPE_CHECKING:
    from virology.domain.models.test_order import TestOrderStatus


class InvalidStateTransitionError(VirologyError):
    """Raised when a test order is moved outside the transition matrix.

    Attributes:
        from_status: Current status of the test order.
        to_status: Attempted target status.
    """

    def __init__(self, from_status: TestOrderStatus, to_status: TestOrderStatus) -> None:
        """Initialize invalid state transition error.

        Args:
            from_status: Current test order status.
            to_status: Attempted invalid target status.
        """
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid test order transition: {from_status.value} -> {to_status.value}"
        )
