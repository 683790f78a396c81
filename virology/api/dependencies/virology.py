"""Virology API dependencies.

Dependency injection setup for the virology services. Each getter builds
its singleton on first use from the bootstrap store, the environment
configuration and the shared metrics collector.

Tests replace pieces with the set_* functions and clear everything with
reset_virology_dependencies().
"""

from __future__ import annotations

from virology.application.ports.token_generator import TokenGeneratorProtocol
from virology.application.services.cta_exchange_service import CtaExchangeService
from virology.application.services.result_lookup_service import ResultLookupService
from virology.application.services.test_order_service import TestOrderService
from virology.application.services.test_result_service import TestResultService
from virology.application.services.throttling_service import (
    Throttle,
    ThrottledCtaExchangeService,
)
from virology.bootstrap.metrics import get_metrics_collector
from virology.bootstrap.test_order_store import (
    get_test_order_store,
    get_time_authority,
    reset_test_order_store,
)
from virology.config.virology_config import VirologyTokenConfig, VirologyWebsiteConfig
from virology.domain.services.token_generator import TokenGenerator

_token_config: VirologyTokenConfig | None = None
_website_config: VirologyWebsiteConfig | None = None
_token_generator: TokenGeneratorProtocol | None = None
_test_order_service: TestOrderService | None = None
_result_lookup_service: ResultLookupService | None = None
_cta_exchange_service: CtaExchangeService | None = None
_exchange_throttle: Throttle | None = None
_throttled_cta_exchange_service: ThrottledCtaExchangeService | None = None
_test_result_service: TestResultService | None = None


def get_token_config() -> VirologyTokenConfig:
    """Get token configuration from the environment."""
    global _token_config
    if _token_config is None:
        _token_config = VirologyTokenConfig.from_environment()
    return _token_config


def get_website_config() -> VirologyWebsiteConfig:
    """Get website configuration.

    Raises:
        ConfigurationError: If ORDER_WEBSITE or REGISTER_WEBSITE is unset.
    """
    global _website_config
    if _website_config is None:
        _website_config = VirologyWebsiteConfig.from_environment()
    return _website_config


def get_token_generator() -> TokenGeneratorProtocol:
    global _token_generator
    if _token_generator is None:
        _token_generator = TokenGenerator()
    return _token_generator


def get_test_order_service() -> TestOrderService:
    """Get the service behind /home-kit/order and /home-kit/register."""
    global _test_order_service
    if _test_order_service is None:
        _test_order_service = TestOrderService(
            store=get_test_order_store(),
            token_generator=get_token_generator(),
            website_config=get_website_config(),
            time_authority=get_time_authority(),
            token_config=get_token_config(),
            metrics=get_metrics_collector(),
        )
    return _test_order_service


def get_result_lookup_service() -> ResultLookupService:
    global _result_lookup_service
    if _result_lookup_service is None:
        _result_lookup_service = ResultLookupService(
            store=get_test_order_store(),
            metrics=get_metrics_collector(),
        )
    return _result_lookup_service


def get_cta_exchange_service() -> CtaExchangeService:
    """Get the unthrottled exchange service wrapped by the throttled one."""
    global _cta_exchange_service
    if _cta_exchange_service is None:
        _cta_exchange_service = CtaExchangeService(
            store=get_test_order_store(),
            time_authority=get_time_authority(),
            consumed_ttl=get_token_config().consumed_ttl,
            metrics=get_metrics_collector(),
        )
    return _cta_exchange_service


def get_exchange_throttle() -> Throttle:
    global _exchange_throttle
    if _exchange_throttle is None:
        _exchange_throttle = Throttle(
            min_duration_seconds=get_token_config().throttle_seconds,
            time_authority=get_time_authority(),
        )
    return _exchange_throttle


def get_throttled_cta_exchange_service() -> ThrottledCtaExchangeService:
    """Get the exchange service behind /cta-exchange.

    The route runs body parsing and the exchange together inside its
    throttle.
    """
    global _throttled_cta_exchange_service
    if _throttled_cta_exchange_service is None:
        _throttled_cta_exchange_service = ThrottledCtaExchangeService(
            inner=get_cta_exchange_service(),
            throttle=get_exchange_throttle(),
        )
    return _throttled_cta_exchange_service


def get_test_result_service() -> TestResultService:
    global _test_result_service
    if _test_result_service is None:
        _test_result_service = TestResultService(
            store=get_test_order_store(),
            metrics=get_metrics_collector(),
        )
    return _test_result_service


def set_token_config(config: VirologyTokenConfig) -> None:
    """Set custom token config for testing."""
    global _token_config
    _token_config = config


def set_token_generator(generator: TokenGeneratorProtocol) -> None:
    """Set custom token generator for testing."""
    global _token_generator
    _token_generator = generator


def reset_virology_dependencies() -> None:
    """Reset virology dependency singletons, the store included."""
    global _token_config
    global _website_config
    global _token_generator
    global _test_order_service
    global _result_lookup_service
    global _cta_exchange_service
    global _exchange_throttle
    global _throttled_cta_exchange_service
    global _test_result_service

    _token_config = None
    _website_config = None
    _token_generator = None
    _test_order_service = None
    _result_lookup_service = None
    _cta_exchange_service = None
    _exchange_throttle = None
    _throttled_cta_exchange_service = None
    _test_result_service = None
    reset_test_order_store()
