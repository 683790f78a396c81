"""CTA exchange service: redeeming a CTA token for a submission token.

The exchange is the only way the diagnosis key submission token leaves
the server, and it leaves at most once per order.

Developer Golden Rules:
1. ONE WINNER - the AVAILABLE -> CONSUMED move is a conditional update;
   of any number of concurrent exchanges exactly one observes APPLIED
2. NO EARLY DISCLOSURE - a PENDING order returns nothing but PENDING
3. LOSERS LOOK PENDING - a CONSUMED order is indistinguishable from one
   still awaiting its result
4. NO RETRY - a failed predicate is an answer, not a transient fault
5. THROTTLING IS NOT HERE - the minimum latency is applied by the caller
"""

from __future__ import annotations

from datetime import timedelta

from virology.application.ports.test_order_store import (
    TestOrderStoreProtocol,
    UpdateStatus,
)
from virology.application.ports.time_authority import TimeAuthorityProtocol
from virology.application.services.base import LoggingMixin
from virology.config.virology_config import DEFAULT_VIROLOGY_TOKEN_CONFIG
from virology.domain.models.outcomes import ExchangeOutcome
from virology.domain.models.test_order import Country, TestOrder, TestOrderStatus
from virology.domain.services.token_generator import (
    is_valid_cta_token,
    normalize_cta_token,
)
from virology.infrastructure.monitoring.metrics import MetricsCollector


def _mask(cta_token: str) -> str:
    return cta_token[:2] + "*" * max(len(cta_token) - 2, 0)


class CtaExchangeService(LoggingMixin):
    """Service for exchanging CTA tokens.

    Attributes:
        _store: Test order store.
        _time: Clock for the shortened expiry of consumed records.
        _consumed_ttl: How long a consumed record is kept.
        _metrics: Optional metrics collector.
    """

    def __init__(
        self,
        store: TestOrderStoreProtocol,
        time_authority: TimeAuthorityProtocol,
        consumed_ttl: timedelta = DEFAULT_VIROLOGY_TOKEN_CONFIG.consumed_ttl,
        metrics: MetricsCollector | None = None,
    ) -> None:
        """Initialize the CTA exchange service.

        Args:
            store: Store holding the test orders.
            time_authority: Clock for expiry calculation.
            consumed_ttl: Lifetime of a record after consumption.
            metrics: Optional metrics collector.
        """
        self._store = store
        self._time = time_authority
        self._consumed_ttl = consumed_ttl
        self._metrics = metrics
        self._init_logger(component="virology")

    async def exchange(
        self,
        cta_token: str,
        country: Country | None = None,
    ) -> ExchangeOutcome:
        """Exchange a CTA token for the submission token and result.

        Args:
            cta_token: CTA token as typed by the citizen.
            country: Country reported by the mobile client, logged only.

        Returns:
            CONSUMED with the payload for the single winning caller,
            PENDING when there is nothing (more) to hand out, NOT_FOUND
            for unknown or malformed tokens.

        Raises:
            StoreUnavailableError: If the store failed.
        """
        normalized = normalize_cta_token(cta_token)
        log = self._log_operation(
            "exchange",
            cta_token=_mask(normalized),
            country=country.value if country else None,
        )

        if not is_valid_cta_token(normalized):
            log.info("cta_exchange_rejected", reason="malformed_token")
            return self._record(ExchangeOutcome.not_found())

        expire_at = self._time.utcnow() + self._consumed_ttl

        def is_available(order: TestOrder) -> bool:
            return order.status is TestOrderStatus.AVAILABLE

        def consume(order: TestOrder) -> TestOrder:
            return order.consumed(expire_at)

        result = await self._store.conditional_update(normalized, is_available, consume)

        if result.status is UpdateStatus.APPLIED and result.prior is not None:
            log.info("cta_exchange_consumed", test_result=result.prior.test_result.value)
            return self._record(ExchangeOutcome.consumed(result.prior))

        if result.status is UpdateStatus.PREDICATE_FAILED:
            status = result.prior.status.value if result.prior else None
            log.info("cta_exchange_not_ready", status=status)
            return self._record(ExchangeOutcome.pending())

        log.info("cta_exchange_rejected", reason="not_found")
        return self._record(ExchangeOutcome.not_found())

    def _record(self, outcome: ExchangeOutcome) -> ExchangeOutcome:
        if self._metrics is not None:
            self._metrics.increment_cta_exchanges(outcome.status.value)
        return outcome
