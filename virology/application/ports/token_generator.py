"""Token generator port.

Lets the order service be driven by a deterministic or colliding
generator in tests while production uses the random TokenGenerator.
"""

from __future__ import annotations

from typing import Protocol


class TokenGeneratorProtocol(Protocol):
    """Protocol for generating test order tokens."""

    def new_cta_token(self) -> str:
        """Generate a hand-typeable CTA token."""
        ...

    def new_polling_token(self) -> str:
        """Generate a test result polling token."""
        ...

    def new_submission_token(self) -> str:
        """Generate a diagnosis key submission token."""
        ...
