"""Integration tests for PostgresTestOrderStore against a real PostgreSQL."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from tests.helpers import FakeTimeAuthority
from virology.application.ports.test_order_store import CreateResult, UpdateStatus
from virology.application.services.cta_exchange_service import CtaExchangeService
from virology.domain.models.outcomes import ExchangeStatus
from virology.domain.models.test_order import (
    TestKit,
    TestOrder,
    TestOrderStatus,
    TestResult,
    VirologyRequestType,
)
from virology.domain.services.token_generator import TokenGenerator
from virology.infrastructure.adapters.persistence import PostgresTestOrderStore

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]

END_DATE = datetime(2020, 9, 10, 0, 0, 0, tzinfo=timezone.utc)


def _order(now: datetime, ttl: timedelta = timedelta(days=28)) -> TestOrder:
    tokens = TokenGenerator()
    return TestOrder(
        cta_token=tokens.new_cta_token(),
        test_result_polling_token=tokens.new_polling_token(),
        diagnosis_key_submission_token=tokens.new_submission_token(),
        request_type=VirologyRequestType.REGISTER,
        created_at=now,
        expire_at=now + ttl,
    )


def _is_pending(order: TestOrder) -> bool:
    return order.status is TestOrderStatus.PENDING


def _post_result(order: TestOrder) -> TestOrder:
    return order.with_result(TestResult.POSITIVE, END_DATE, TestKit.RAPID_RESULT)


async def test_round_trip(
    postgres_store: PostgresTestOrderStore, fake_time_authority: FakeTimeAuthority
) -> None:
    order = _order(fake_time_authority.utcnow())

    assert await postgres_store.create_if_absent(order) is CreateResult.CREATED
    assert await postgres_store.get(order.cta_token) == order
    assert (
        await postgres_store.get_by_polling_token(order.test_result_polling_token)
        == order
    )


async def test_duplicate_polling_token_is_already_exists(
    postgres_store: PostgresTestOrderStore, fake_time_authority: FakeTimeAuthority
) -> None:
    first = _order(fake_time_authority.utcnow())
    second = _order(fake_time_authority.utcnow())
    clash = TestOrder(
        cta_token=second.cta_token,
        test_result_polling_token=first.test_result_polling_token,
        diagnosis_key_submission_token=second.diagnosis_key_submission_token,
        request_type=second.request_type,
        created_at=second.created_at,
        expire_at=second.expire_at,
    )

    await postgres_store.create_if_absent(first)

    assert await postgres_store.create_if_absent(clash) is CreateResult.ALREADY_EXISTS
    assert await postgres_store.get(second.cta_token) is None


async def test_concurrent_creates_have_one_winner(
    postgres_store: PostgresTestOrderStore, fake_time_authority: FakeTimeAuthority
) -> None:
    order = _order(fake_time_authority.utcnow())

    results = await asyncio.gather(
        *(postgres_store.create_if_absent(order) for _ in range(10))
    )

    assert results.count(CreateResult.CREATED) == 1


async def test_expired_rows_are_absent_and_reusable(
    postgres_store: PostgresTestOrderStore, fake_time_authority: FakeTimeAuthority
) -> None:
    order = _order(fake_time_authority.utcnow(), ttl=timedelta(hours=1))
    await postgres_store.create_if_absent(order)

    fake_time_authority.advance(seconds=3600)

    assert await postgres_store.get(order.cta_token) is None
    assert await postgres_store.create_if_absent(order) is CreateResult.CREATED


async def test_conditional_update_outcomes(
    postgres_store: PostgresTestOrderStore, fake_time_authority: FakeTimeAuthority
) -> None:
    order = _order(fake_time_authority.utcnow())
    await postgres_store.create_if_absent(order)

    applied = await postgres_store.conditional_update(
        order.cta_token, _is_pending, _post_result
    )
    failed = await postgres_store.conditional_update(
        order.cta_token, _is_pending, _post_result
    )
    missing = await postgres_store.conditional_update(
        "00000012", _is_pending, _post_result
    )

    assert applied.status is UpdateStatus.APPLIED
    assert applied.prior == order
    stored = await postgres_store.get(order.cta_token)
    assert stored == applied.updated
    assert stored is not None
    assert stored.test_kit is TestKit.RAPID_RESULT
    assert failed.status is UpdateStatus.PREDICATE_FAILED
    assert missing.status is UpdateStatus.NOT_FOUND


async def test_concurrent_exchanges_release_payload_once(
    postgres_store: PostgresTestOrderStore, fake_time_authority: FakeTimeAuthority
) -> None:
    order = _order(fake_time_authority.utcnow())
    await postgres_store.create_if_absent(order)
    await postgres_store.conditional_update(order.cta_token, _is_pending, _post_result)
    service = CtaExchangeService(postgres_store, fake_time_authority)

    outcomes = await asyncio.gather(
        *(service.exchange(order.cta_token) for _ in range(10))
    )

    statuses = [o.status for o in outcomes]
    assert statuses.count(ExchangeStatus.CONSUMED) == 1
    assert statuses.count(ExchangeStatus.PENDING) == 9
