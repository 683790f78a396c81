"""Domain services: pure logic with no I/O."""

from virology.domain.services.token_generator import (
    TokenGenerator,
    is_valid_cta_token,
    is_valid_uuid_token,
    normalize_cta_token,
)

__all__: list[str] = [
    "TokenGenerator",
    "is_valid_cta_token",
    "is_valid_uuid_token",
    "normalize_cta_token",
]
