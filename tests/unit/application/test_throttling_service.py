"""Unit tests for the Throttle and ThrottledCtaExchangeService."""

import time
from datetime import datetime, timezone

import pytest

from tests.helpers import FakeTimeAuthority
from virology.application.services.cta_exchange_service import CtaExchangeService
from virology.application.services.test_result_service import TestResultService
from virology.application.services.throttling_service import (
    Throttle,
    ThrottledCtaExchangeService,
)
from virology.domain.errors import StoreUnavailableError
from virology.domain.models.outcomes import ExchangeStatus
from virology.domain.models.test_order import (
    TestOrder,
    TestResult,
    VirologyRequestType,
)
from virology.infrastructure.adapters.time.system_time_authority import (
    SystemTimeAuthority,
)
from virology.infrastructure.stubs.test_order_store_stub import TestOrderStoreStub

D = 1.0


class TestThrottle:
    """Tests for the minimum latency floor."""

    @pytest.mark.asyncio
    async def test_fast_operation_is_delayed_to_floor(
        self, fake_time_authority: FakeTimeAuthority
    ) -> None:
        throttle = Throttle(D, fake_time_authority)
        start = fake_time_authority.monotonic()

        async def fast() -> str:
            fake_time_authority.advance(seconds=0.2)
            return "done"

        assert await throttle.run(fast) == "done"
        assert fake_time_authority.monotonic() - start == pytest.approx(D)
        assert fake_time_authority.sleeps == [pytest.approx(0.8)]

    @pytest.mark.asyncio
    async def test_slow_operation_is_not_delayed(
        self, fake_time_authority: FakeTimeAuthority
    ) -> None:
        throttle = Throttle(D, fake_time_authority)

        async def slow() -> int:
            fake_time_authority.advance(seconds=2.5)
            return 7

        assert await throttle.run(slow) == 7
        assert fake_time_authority.sleeps == []

    @pytest.mark.asyncio
    async def test_failure_is_delayed_then_raised(
        self, fake_time_authority: FakeTimeAuthority
    ) -> None:
        throttle = Throttle(D, fake_time_authority)
        start = fake_time_authority.monotonic()

        async def failing() -> None:
            raise StoreUnavailableError("conditional_update")

        with pytest.raises(StoreUnavailableError):
            await throttle.run(failing)

        assert fake_time_authority.monotonic() - start == pytest.approx(D)

    @pytest.mark.asyncio
    async def test_zero_floor_never_sleeps(
        self, fake_time_authority: FakeTimeAuthority
    ) -> None:
        throttle = Throttle(0.0, fake_time_authority)

        async def instant() -> None:
            return None

        await throttle.run(instant)
        assert fake_time_authority.sleeps == []

    @pytest.mark.parametrize("floor", [-0.1, float("nan"), float("inf")])
    def test_invalid_floor_is_rejected(
        self, floor: float, fake_time_authority: FakeTimeAuthority
    ) -> None:
        with pytest.raises(ValueError):
            Throttle(floor, fake_time_authority)

    @pytest.mark.asyncio
    async def test_real_clock_floor(self) -> None:
        """The floor holds on the real clock with tight variance."""
        floor = 0.1
        throttle = Throttle(floor, SystemTimeAuthority())

        async def instant() -> None:
            return None

        durations = []
        for _ in range(3):
            start = time.monotonic()
            await throttle.run(instant)
            durations.append(time.monotonic() - start)

        assert all(d >= floor for d in durations)
        assert max(durations) - min(durations) < 0.05


class TestThrottledCtaExchangeService:
    """The decorator applies the floor to every exchange outcome."""

    @pytest.mark.asyncio
    async def test_every_outcome_takes_at_least_the_floor(
        self, order_store: TestOrderStoreStub, fake_time_authority: FakeTimeAuthority
    ) -> None:
        now = fake_time_authority.utcnow()
        pending = TestOrder(
            cta_token="00000012",
            test_result_polling_token="6f1c3e2a-9b8d-4c7e-a5f4-3b2a1c0d9e8f",
            diagnosis_key_submission_token="1a2b3c4d-5e6f-4a8b-9c0d-e1f2a3b4c5d6",
            request_type=VirologyRequestType.ORDER,
            created_at=now,
            expire_at=now.replace(year=2021),
        )
        await order_store.create_if_absent(pending)
        service = ThrottledCtaExchangeService(
            CtaExchangeService(order_store, fake_time_authority),
            Throttle(D, fake_time_authority),
        )

        async def timed(cta_token: str) -> tuple[ExchangeStatus, float]:
            start = fake_time_authority.monotonic()
            outcome = await service.exchange(cta_token)
            return outcome.status, fake_time_authority.monotonic() - start

        assert await timed("00000012") == (ExchangeStatus.PENDING, pytest.approx(D))
        assert await timed("not-a-token") == (ExchangeStatus.NOT_FOUND, pytest.approx(D))

        await TestResultService(order_store).post_result(
            "00000012",
            TestResult.POSITIVE,
            datetime(2020, 9, 10, tzinfo=timezone.utc),
        )
        assert await timed("00000012") == (ExchangeStatus.CONSUMED, pytest.approx(D))
        assert await timed("00000012") == (ExchangeStatus.PENDING, pytest.approx(D))
        assert service.throttle.min_duration_seconds == D
