"""Token generation for test orders.

CTA tokens are typed by hand, so they are short and drawn from the
lowercase Crockford base-32 alphabet (no i, l, o or u), with a trailing
Damm check character that catches every single-character typo and every
adjacent transposition before the store is ever touched.

Polling and diagnosis key submission tokens are only handled by the
mobile client, so they are random UUID4 strings.

Tokens are opaque identifiers: nothing routes on their structure beyond
the format checks below.
"""

from __future__ import annotations

import secrets
from uuid import UUID, uuid4

CROCKFORD_ALPHABET = "0123456789abcdefghjkmnpqrstvwxyz"
CTA_TOKEN_LENGTH = 8

# x^5 + x^2 + 1, primitive over GF(2)
_GF32_REDUCTION = 0b100101
_CHAR_VALUES = {char: index for index, char in enumerate(CROCKFORD_ALPHABET)}


def _gf32_double(value: int) -> int:
    value <<= 1
    if value & 0b100000:
        value ^= _GF32_REDUCTION
    return value


def damm32_interim(values: list[int]) -> int:
    """Run the Damm quasigroup x∘y = 2x ⊕ y over GF(32).

    Args:
        values: Character values (0-31) in order.

    Returns:
        The interim digit after consuming all values. A string with a
        correct check character yields 0.
    """
    interim = 0
    for value in values:
        interim = _gf32_double(interim) ^ value
    return interim


def damm32_check_char(payload: str) -> str:
    """Compute the check character for a Crockford base-32 payload."""
    interim = damm32_interim([_CHAR_VALUES[char] for char in payload])
    return CROCKFORD_ALPHABET[_gf32_double(interim)]


def normalize_cta_token(value: str) -> str:
    """Lowercase and strip a CTA token as typed by a citizen."""
    return value.strip().lower()


def is_valid_cta_token(value: object) -> bool:
    """Check length, alphabet and checksum of a normalized CTA token."""
    if not isinstance(value, str) or len(value) != CTA_TOKEN_LENGTH:
        return False
    if any(char not in _CHAR_VALUES for char in value):
        return False
    return damm32_interim([_CHAR_VALUES[char] for char in value]) == 0


def is_valid_uuid_token(value: object) -> bool:
    """Check that a value is a canonical (lowercase, hyphenated) UUID string."""
    if not isinstance(value, str):
        return False
    try:
        return str(UUID(value)) == value
    except ValueError:
        return False


class TokenGenerator:
    """Generates opaque tokens for new test orders.

    Randomness comes from the secrets module and uuid4 (os.urandom), so
    generation is unpredictable and never fails.
    """

    def new_cta_token(self) -> str:
        """Generate a CTA token: 7 random characters plus a Damm check character."""
        payload = "".join(
            secrets.choice(CROCKFORD_ALPHABET) for _ in range(CTA_TOKEN_LENGTH - 1)
        )
        return payload + damm32_check_char(payload)

    def new_polling_token(self) -> str:
        """Generate a test result polling token."""
        return str(uuid4())

    def new_submission_token(self) -> str:
        """Generate a diagnosis key submission token."""
        return str(uuid4())
