"""
Integration test configuration with testcontainers.

Provides a session-scoped PostgreSQL 16 container and a per-test
PostgresTestOrderStore on an empty table.

Usage:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_example(postgres_store: PostgresTestOrderStore) -> None:
        ...

Note: Docker must be running; without it these tests are skipped.
"""

from collections.abc import AsyncGenerator, Generator

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tests.helpers import FakeTimeAuthority
from virology.bootstrap.database import to_async_url
from virology.infrastructure.adapters.persistence import PostgresTestOrderStore
from virology.infrastructure.adapters.persistence.postgres_test_order_store import (
    TABLE_NAME,
)


@pytest.fixture(scope="session")
def postgres_container() -> Generator[object, None, None]:
    """Session-scoped PostgreSQL 16 container."""
    postgres_module = pytest.importorskip("testcontainers.postgres")
    try:
        container = postgres_module.PostgresContainer("postgres:16-alpine")
        container.start()
    except Exception as exc:  # Docker not available
        pytest.skip(f"PostgreSQL container unavailable: {exc}")
    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def postgres_async_url(postgres_container: object) -> str:
    """asyncpg connection URL for the container.

    testcontainers returns a psycopg2 URL by default.
    """
    sync_url: str = postgres_container.get_connection_url()  # type: ignore[attr-defined]
    return to_async_url(sync_url.replace("postgresql+psycopg2://", "postgresql://"))


@pytest.fixture
async def postgres_store(
    postgres_async_url: str, fake_time_authority: FakeTimeAuthority
) -> AsyncGenerator[PostgresTestOrderStore, None]:
    """Store on a freshly emptied table, sharing the fake clock."""
    engine = create_async_engine(postgres_async_url, echo=False)
    session_factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False
    )
    store = PostgresTestOrderStore(session_factory, fake_time_authority)
    await store.create_schema()
    async with session_factory() as session, session.begin():
        await session.execute(text(f"TRUNCATE {TABLE_NAME}"))
    yield store
    await engine.dispose()
