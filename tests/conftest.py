"""
Pytest configuration and shared fixtures for the virology token service.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async function mocking
- Time-dependent tests use FakeTimeAuthority, never the wall clock
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

from collections.abc import Iterator

import pytest

from tests.helpers import FakeTimeAuthority
from tests.helpers.environment import ORDER_WEBSITE, REGISTER_WEBSITE
from virology.infrastructure.stubs.test_order_store_stub import TestOrderStoreStub


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture(autouse=True)
def virology_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Provide the required website settings and a clean dependency graph."""
    from virology.api.dependencies.virology import reset_virology_dependencies
    from virology.bootstrap.metrics import reset_metrics

    monkeypatch.setenv("ORDER_WEBSITE", ORDER_WEBSITE)
    monkeypatch.setenv("REGISTER_WEBSITE", REGISTER_WEBSITE)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    reset_virology_dependencies()
    reset_metrics()
    yield
    reset_virology_dependencies()
    reset_metrics()


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    """Fresh fake clock frozen at 2020-09-10T12:00:00Z."""
    return FakeTimeAuthority()


@pytest.fixture
def order_store(fake_time_authority: FakeTimeAuthority) -> TestOrderStoreStub:
    """In-memory store sharing the fake clock."""
    return TestOrderStoreStub(time_authority=fake_time_authority)
