"""Result lookup service: polling for a test result.

Read-only. Repeating a lookup never changes stored state, and a polling
token never reveals the diagnosis key submission token.
"""

from __future__ import annotations

from virology.application.ports.test_order_store import TestOrderStoreProtocol
from virology.application.services.base import LoggingMixin
from virology.domain.models.outcomes import LookupOutcome
from virology.domain.models.test_order import TestOrderStatus
from virology.domain.services.token_generator import is_valid_uuid_token
from virology.infrastructure.monitoring.metrics import MetricsCollector


class ResultLookupService(LoggingMixin):
    """Looks up test result availability by polling token."""

    def __init__(
        self,
        store: TestOrderStoreProtocol,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._store = store
        self._metrics = metrics
        self._init_logger(component="virology")

    async def lookup(self, polling_token: str | None) -> LookupOutcome:
        """Return the availability of the result for a polling token.

        A missing or malformed token is reported as NOT_FOUND without
        touching the store. A CONSUMED record still reports AVAILABLE.

        Args:
            polling_token: Token issued when the kit was ordered.

        Returns:
            LookupOutcome (NOT_FOUND, PENDING or AVAILABLE).

        Raises:
            StoreUnavailableError: If the store failed.
        """
        log = self._log_operation("lookup")

        if not is_valid_uuid_token(polling_token):
            outcome = LookupOutcome.not_found()
        else:
            order = await self._store.get_by_polling_token(polling_token)
            if order is None:
                outcome = LookupOutcome.not_found()
            elif order.status is TestOrderStatus.PENDING:
                outcome = LookupOutcome.pending()
            else:
                outcome = LookupOutcome.available(order)

        if self._metrics is not None:
            self._metrics.increment_result_lookups(outcome.status.value)
        log.info("result_lookup_completed", outcome=outcome.status.value)
        return outcome
