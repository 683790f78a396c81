"""PostgreSQL implementation of TestOrderStoreProtocol.

Uses SQLAlchemy's async engine with hand-written SQL.

SQL Patterns:
    -- Conditional create: unique constraints on all three tokens
    INSERT ... ON CONFLICT DO NOTHING RETURNING cta_token

    -- Conditional update: row lock held across read, check and write
    SELECT ... WHERE cta_token = $1 FOR UPDATE
    UPDATE ... WHERE cta_token = $1

Any SQLAlchemyError is re-raised as StoreUnavailableError; the services
never retry it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from virology.application.ports.test_order_store import (
    ConditionalUpdateResult,
    CreateResult,
    TestOrderMutator,
    TestOrderPredicate,
    TestOrderStoreProtocol,
    UpdateStatus,
)
from virology.application.ports.time_authority import TimeAuthorityProtocol
from virology.domain.errors.store import StoreUnavailableError
from virology.domain.models.test_order import (
    TestKit,
    TestOrder,
    TestOrderStatus,
    TestResult,
    VirologyRequestType,
)

logger = get_logger()

TABLE_NAME = "virology_test_orders"

SCHEMA_STATEMENTS: tuple[str, ...] = (
    f"""
    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
        cta_token TEXT PRIMARY KEY,
        test_result_polling_token TEXT NOT NULL UNIQUE,
        diagnosis_key_submission_token TEXT NOT NULL UNIQUE,
        request_type TEXT NOT NULL,
        status TEXT NOT NULL,
        test_result TEXT,
        test_end_date TIMESTAMPTZ,
        test_kit TEXT,
        created_at TIMESTAMPTZ NOT NULL,
        expire_at TIMESTAMPTZ NOT NULL
    )
    """,
    f"CREATE INDEX IF NOT EXISTS ix_{TABLE_NAME}_expire_at ON {TABLE_NAME} (expire_at)",
)

_COLUMNS = (
    "cta_token, test_result_polling_token, diagnosis_key_submission_token, "
    "request_type, status, test_result, test_end_date, test_kit, "
    "created_at, expire_at"
)


def _row_to_order(row: Mapping[str, Any]) -> TestOrder:
    return TestOrder(
        cta_token=row["cta_token"],
        test_result_polling_token=row["test_result_polling_token"],
        diagnosis_key_submission_token=row["diagnosis_key_submission_token"],
        request_type=VirologyRequestType(row["request_type"]),
        status=TestOrderStatus(row["status"]),
        test_result=TestResult(row["test_result"]) if row["test_result"] else None,
        test_end_date=row["test_end_date"],
        test_kit=TestKit(row["test_kit"]) if row["test_kit"] else None,
        created_at=row["created_at"],
        expire_at=row["expire_at"],
    )


def _order_to_params(order: TestOrder) -> dict[str, Any]:
    return {
        "cta_token": order.cta_token,
        "test_result_polling_token": order.test_result_polling_token,
        "diagnosis_key_submission_token": order.diagnosis_key_submission_token,
        "request_type": order.request_type.value,
        "status": order.status.value,
        "test_result": order.test_result.value if order.test_result else None,
        "test_end_date": order.test_end_date,
        "test_kit": order.test_kit.value if order.test_kit else None,
        "created_at": order.created_at,
        "expire_at": order.expire_at,
    }


class PostgresTestOrderStore(TestOrderStoreProtocol):
    """PostgreSQL-backed test order store.

    Attributes:
        _session_factory: SQLAlchemy async session factory.
        _time: Clock used for expiry checks.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._session_factory = session_factory
        self._time = time_authority

    async def create_schema(self) -> None:
        """Create the test order table and indexes if they do not exist."""
        try:
            async with self._session_factory() as session, session.begin():
                for statement in SCHEMA_STATEMENTS:
                    await session.execute(text(statement))
        except SQLAlchemyError as e:
            raise StoreUnavailableError("create_schema", str(e)) from e
        logger.info("test_order_schema_ready", table=TABLE_NAME)

    async def create_if_absent(self, order: TestOrder) -> CreateResult:
        """Insert a new order; any token clash yields ALREADY_EXISTS.

        Expired rows holding one of the tokens are deleted in the same
        transaction so their tokens can be reused.
        """
        params = _order_to_params(order)
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(
                    text(f"""
                        DELETE FROM {TABLE_NAME}
                        WHERE expire_at <= :now
                          AND (cta_token = :cta_token
                               OR test_result_polling_token = :test_result_polling_token
                               OR diagnosis_key_submission_token
                                  = :diagnosis_key_submission_token)
                    """),
                    {
                        "now": self._time.utcnow(),
                        "cta_token": order.cta_token,
                        "test_result_polling_token": order.test_result_polling_token,
                        "diagnosis_key_submission_token": (
                            order.diagnosis_key_submission_token
                        ),
                    },
                )
                result = await session.execute(
                    text(f"""
                        INSERT INTO {TABLE_NAME} ({_COLUMNS})
                        VALUES (
                            :cta_token, :test_result_polling_token,
                            :diagnosis_key_submission_token, :request_type,
                            :status, :test_result, :test_end_date, :test_kit,
                            :created_at, :expire_at
                        )
                        ON CONFLICT DO NOTHING
                        RETURNING cta_token
                    """),
                    params,
                )
                inserted = result.first() is not None
        except SQLAlchemyError as e:
            raise StoreUnavailableError("create_if_absent", str(e)) from e

        return CreateResult.CREATED if inserted else CreateResult.ALREADY_EXISTS

    async def get(self, cta_token: str) -> TestOrder | None:
        return await self._select_one("cta_token", cta_token, operation="get")

    async def get_by_polling_token(self, polling_token: str) -> TestOrder | None:
        return await self._select_one(
            "test_result_polling_token",
            polling_token,
            operation="get_by_polling_token",
        )

    async def conditional_update(
        self,
        cta_token: str,
        predicate: TestOrderPredicate,
        mutator: TestOrderMutator,
    ) -> ConditionalUpdateResult:
        """Atomically replace an order if the predicate holds.

        The row lock taken by SELECT ... FOR UPDATE serializes concurrent
        updates of the same CTA token until the transaction commits.
        """
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(
                    text(f"""
                        SELECT {_COLUMNS}
                        FROM {TABLE_NAME}
                        WHERE cta_token = :cta_token AND expire_at > :now
                        FOR UPDATE
                    """),
                    {"cta_token": cta_token, "now": self._time.utcnow()},
                )
                row = result.mappings().first()
                if row is None:
                    return ConditionalUpdateResult(status=UpdateStatus.NOT_FOUND)

                current = _row_to_order(row)
                if not predicate(current):
                    return ConditionalUpdateResult(
                        status=UpdateStatus.PREDICATE_FAILED, prior=current
                    )

                updated = mutator(current)
                if (
                    updated.cta_token != current.cta_token
                    or updated.test_result_polling_token
                    != current.test_result_polling_token
                    or updated.diagnosis_key_submission_token
                    != current.diagnosis_key_submission_token
                ):
                    raise ValueError(
                        "Conditional update must not change test order tokens"
                    )

                await session.execute(
                    text(f"""
                        UPDATE {TABLE_NAME}
                        SET status = :status,
                            test_result = :test_result,
                            test_end_date = :test_end_date,
                            test_kit = :test_kit,
                            expire_at = :expire_at
                        WHERE cta_token = :cta_token
                    """),
                    _order_to_params(updated),
                )
        except SQLAlchemyError as e:
            raise StoreUnavailableError("conditional_update", str(e)) from e

        return ConditionalUpdateResult(
            status=UpdateStatus.APPLIED, prior=current, updated=updated
        )

    async def _select_one(
        self, column: str, value: str, operation: str
    ) -> TestOrder | None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    text(f"""
                        SELECT {_COLUMNS}
                        FROM {TABLE_NAME}
                        WHERE {column} = :value AND expire_at > :now
                    """),
                    {"value": value, "now": self._time.utcnow()},
                )
                row = result.mappings().first()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(operation, str(e)) from e

        return _row_to_order(row) if row is not None else None
