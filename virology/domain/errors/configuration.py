"""Configuration errors raised while building service dependencies."""

from virology.domain.exceptions import VirologyError


class ConfigurationError(VirologyError):
    """Raised when a required setting is missing or invalid.

    Attributes:
        key: Name of the offending setting (environment variable).
    """

    def __init__(self, key: str, message: str | None = None) -> None:
        self.key = key
        super().__init__(message or f"Required configuration {key} is not set")
