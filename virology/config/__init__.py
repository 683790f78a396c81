"""Configuration for the virology token service."""

from virology.config.virology_config import (
    DEFAULT_VIROLOGY_TOKEN_CONFIG,
    MAX_TOKEN_PERSISTENCE_ATTEMPTS,
    VirologyTokenConfig,
    VirologyWebsiteConfig,
)

__all__: list[str] = [
    "DEFAULT_VIROLOGY_TOKEN_CONFIG",
    "MAX_TOKEN_PERSISTENCE_ATTEMPTS",
    "VirologyTokenConfig",
    "VirologyWebsiteConfig",
]
