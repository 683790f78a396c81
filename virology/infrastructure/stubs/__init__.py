"""In-memory stub implementations for development and testing."""

from virology.infrastructure.stubs.test_order_store_stub import TestOrderStoreStub

__all__: list[str] = ["TestOrderStoreStub"]
