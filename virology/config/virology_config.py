"""Virology service configuration.

Configuration for website URLs, exchange throttling, token retry budget
and record lifetimes, with environment variable overrides.

Environment Variables (Website):
- ORDER_WEBSITE: Website the citizen completes a kit order on (required)
- REGISTER_WEBSITE: Website the citizen registers a held kit on (required)

Environment Variables (Tokens):
- VIROLOGY_THROTTLE_SECONDS: Minimum CTA exchange latency (default: 1.0)
- VIROLOGY_MAX_TOKEN_ATTEMPTS: Conditional create attempts per order (default: 3)
- VIROLOGY_ORDER_TTL_DAYS: Lifetime of a test order (default: 28)
- VIROLOGY_CONSUMED_TTL_HOURS: Lifetime after a CTA exchange (default: 4)
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from datetime import timedelta

from virology.domain.errors.configuration import ConfigurationError
from virology.domain.models.test_order import VirologyRequestType

# Conditional create attempts before an order fails as token space exhaustion
MAX_TOKEN_PERSISTENCE_ATTEMPTS = 3

DEFAULT_THROTTLE_SECONDS = 1.0
DEFAULT_ORDER_TTL_DAYS = 28
DEFAULT_CONSUMED_TTL_HOURS = 4


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_required_env(key: str) -> str:
    value = os.environ.get(key, "").strip()
    if not value:
        raise ConfigurationError(key)
    return value


@dataclass(frozen=True)
class VirologyWebsiteConfig:
    """Website URLs handed out with new test orders.

    Attributes:
        order_website: URL for ordering a kit.
        register_website: URL for registering a held kit.
    """

    order_website: str
    register_website: str

    def __post_init__(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: If a URL is not http(s), keyed by the
                environment variable it is read from.
        """
        for name in ("order_website", "register_website"):
            value = getattr(self, name)
            if not value.startswith(("https://", "http://")):
                raise ConfigurationError(
                    name.upper(), f"{name.upper()} must be an http(s) URL, got {value!r}"
                )

    def url_for(self, request_type: VirologyRequestType) -> str:
        """Return the website URL for a request type."""
        if request_type is VirologyRequestType.ORDER:
            return self.order_website
        return self.register_website

    @classmethod
    def from_environment(cls) -> VirologyWebsiteConfig:
        """Create config from ORDER_WEBSITE and REGISTER_WEBSITE.

        Raises:
            ConfigurationError: If either variable is missing.
        """
        return cls(
            order_website=_get_required_env("ORDER_WEBSITE"),
            register_website=_get_required_env("REGISTER_WEBSITE"),
        )


@dataclass(frozen=True)
class VirologyTokenConfig:
    """Configuration for token issuing, throttling and record lifetimes.

    Attributes:
        throttle_seconds: Minimum observable latency of a CTA exchange.
            Default: 1.0 second.
        max_token_attempts: Conditional create attempts per order before
            failing with TokenSpaceExhaustedError. Default: 3.
        order_ttl_days: Days a test order stays retrievable. Default: 28.
        consumed_ttl_hours: Hours a record stays retrievable after its CTA
            token is exchanged. Default: 4.
    """

    throttle_seconds: float = DEFAULT_THROTTLE_SECONDS
    max_token_attempts: int = MAX_TOKEN_PERSISTENCE_ATTEMPTS
    order_ttl_days: int = DEFAULT_ORDER_TTL_DAYS
    consumed_ttl_hours: int = DEFAULT_CONSUMED_TTL_HOURS

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not math.isfinite(self.throttle_seconds) or self.throttle_seconds < 0:
            raise ValueError(
                "throttle_seconds must be finite and non-negative, "
                f"got {self.throttle_seconds}"
            )
        if self.max_token_attempts < 1:
            raise ValueError(
                f"max_token_attempts must be at least 1, got {self.max_token_attempts}"
            )
        if self.order_ttl_days < 1:
            raise ValueError(
                f"order_ttl_days must be positive, got {self.order_ttl_days}"
            )
        if self.consumed_ttl_hours < 1:
            raise ValueError(
                f"consumed_ttl_hours must be positive, got {self.consumed_ttl_hours}"
            )

    @property
    def order_ttl(self) -> timedelta:
        return timedelta(days=self.order_ttl_days)

    @property
    def consumed_ttl(self) -> timedelta:
        return timedelta(hours=self.consumed_ttl_hours)

    @classmethod
    def from_environment(cls) -> VirologyTokenConfig:
        """Create config from environment variables with defaults.

        Returns:
            VirologyTokenConfig with values from environment or defaults.
        """
        return cls(
            throttle_seconds=_get_float_env(
                "VIROLOGY_THROTTLE_SECONDS", DEFAULT_THROTTLE_SECONDS
            ),
            max_token_attempts=_get_int_env(
                "VIROLOGY_MAX_TOKEN_ATTEMPTS", MAX_TOKEN_PERSISTENCE_ATTEMPTS
            ),
            order_ttl_days=_get_int_env("VIROLOGY_ORDER_TTL_DAYS", DEFAULT_ORDER_TTL_DAYS),
            consumed_ttl_hours=_get_int_env(
                "VIROLOGY_CONSUMED_TTL_HOURS", DEFAULT_CONSUMED_TTL_HOURS
            ),
        )


# Default production config
DEFAULT_VIROLOGY_TOKEN_CONFIG = VirologyTokenConfig()
