"""Throttling: a minimum observable latency for an operation.

Wrapping the CTA exchange in a Throttle bounds the rate at which a
single connection can guess CTA tokens. The floor applies to every
outcome, including failures, so timing reveals nothing about whether a
guess hit.
"""

from __future__ import annotations

import math
from collections.abc import Awaitable, Callable
from typing import TypeVar

from virology.application.ports.time_authority import TimeAuthorityProtocol
from virology.application.services.cta_exchange_service import CtaExchangeService
from virology.domain.models.outcomes import ExchangeOutcome
from virology.domain.models.test_order import Country

T = TypeVar("T")


class Throttle:
    """Runs operations with a minimum wall-clock duration.

    Attributes:
        min_duration_seconds: Floor on the duration of each run().
    """

    def __init__(
        self,
        min_duration_seconds: float,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        if not math.isfinite(min_duration_seconds) or min_duration_seconds < 0:
            raise ValueError(
                "min_duration_seconds must be finite and non-negative, "
                f"got {min_duration_seconds}"
            )
        self.min_duration_seconds = min_duration_seconds
        self._time = time_authority

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Await operation and return (or raise) no earlier than the floor.

        The deadline is fixed before the operation starts. An operation
        that already took longer than the floor is not delayed further.

        Args:
            operation: Zero-argument coroutine function to run.

        Returns:
            Whatever the operation returned. Exceptions propagate
            unchanged after the remaining time has elapsed.
        """
        deadline = self._time.monotonic() + self.min_duration_seconds
        try:
            return await operation()
        finally:
            remaining = deadline - self._time.monotonic()
            if remaining > 0:
                await self._time.sleep(remaining)


class ThrottledCtaExchangeService:
    """CtaExchangeService decorator applying a Throttle to exchange().

    Callers that must delay work done before the exchange, such as
    request body parsing, run it inside throttle.run() against inner.
    """

    def __init__(self, inner: CtaExchangeService, throttle: Throttle) -> None:
        self._inner = inner
        self._throttle = throttle

    @property
    def inner(self) -> CtaExchangeService:
        return self._inner

    @property
    def throttle(self) -> Throttle:
        return self._throttle

    async def exchange(
        self,
        cta_token: str,
        country: Country | None = None,
    ) -> ExchangeOutcome:
        return await self._throttle.run(
            lambda: self._inner.exchange(cta_token, country)
        )
