"""Storage failure errors.

A store failure is an infrastructure fault: it propagates upward as a
5xx and is never retried by the services. Conflicts (duplicate token,
failed predicate) are NOT errors and are reported as typed results by
the store port instead.
"""

from __future__ import annotations

from virology.domain.exceptions import VirologyError


class StoreUnavailableError(VirologyError):
    """Raised when the test order store cannot complete an operation.

    Attributes:
        operation: Store operation that failed (e.g. "create_if_absent").
    """

    def __init__(self, operation: str, reason: str = "") -> None:
        """Initialize store unavailable error.

        Args:
            operation: Store operation that failed.
            reason: Underlying driver message, kept out of HTTP responses.
        """
        self.operation = operation
        self.reason = reason
        super().__init__(
            f"Test order store unavailable during {operation}"
            + (f": {reason}" if reason else "")
        )
