"""Database-backed store adapters."""

from virology.infrastructure.adapters.persistence.postgres_test_order_store import (
    PostgresTestOrderStore,
)

__all__: list[str] = ["PostgresTestOrderStore"]
