"""Unit tests for CTA and UUID token generation and validation."""

from uuid import UUID

import pytest

from virology.domain.services.token_generator import (
    CROCKFORD_ALPHABET,
    CTA_TOKEN_LENGTH,
    TokenGenerator,
    damm32_check_char,
    damm32_interim,
    is_valid_cta_token,
    is_valid_uuid_token,
    normalize_cta_token,
)


class TestDammChecksum:
    """Tests for the base-32 Damm check character."""

    def test_all_zero_payload_has_zero_check_char(self) -> None:
        assert damm32_check_char("0000000") == "0"

    def test_known_check_char(self) -> None:
        """'1' leaves interim 1, whose double in GF(32) is 2."""
        assert damm32_check_char("0000001") == "2"
        assert is_valid_cta_token("00000012")

    def test_valid_token_has_zero_interim(self) -> None:
        token = TokenGenerator().new_cta_token()
        values = [CROCKFORD_ALPHABET.index(char) for char in token]
        assert damm32_interim(values) == 0

    def test_every_single_character_substitution_is_detected(self) -> None:
        token = "k7m2q9x" + damm32_check_char("k7m2q9x")
        for position in range(len(token)):
            for replacement in CROCKFORD_ALPHABET:
                if replacement == token[position]:
                    continue
                typo = token[:position] + replacement + token[position + 1 :]
                assert not is_valid_cta_token(typo), typo

    def test_adjacent_transpositions_are_detected(self) -> None:
        token = "a1b2c3d" + damm32_check_char("a1b2c3d")
        for position in range(len(token) - 1):
            if token[position] == token[position + 1]:
                continue
            swapped = (
                token[:position]
                + token[position + 1]
                + token[position]
                + token[position + 2 :]
            )
            assert not is_valid_cta_token(swapped), swapped


class TestCtaTokenFormat:
    """Tests for CTA token validation and normalization."""

    def test_generated_tokens_are_valid(self) -> None:
        generator = TokenGenerator()
        for _ in range(200):
            token = generator.new_cta_token()
            assert len(token) == CTA_TOKEN_LENGTH
            assert set(token) <= set(CROCKFORD_ALPHABET)
            assert is_valid_cta_token(token)

    @pytest.mark.parametrize(
        "value",
        [None, 12345678, "", "0000000", "000000000", "0000000i", "0000000!"],
    )
    def test_rejects_malformed_values(self, value: object) -> None:
        assert not is_valid_cta_token(value)

    def test_uppercase_is_rejected_until_normalized(self) -> None:
        token = "k7m2q9x" + damm32_check_char("k7m2q9x")
        typed = f"  {token.upper()} "
        assert not is_valid_cta_token(typed)
        assert is_valid_cta_token(normalize_cta_token(typed))


class TestUuidTokens:
    """Tests for polling and submission tokens."""

    def test_polling_and_submission_tokens_are_uuid4(self) -> None:
        generator = TokenGenerator()
        for token in (generator.new_polling_token(), generator.new_submission_token()):
            assert UUID(token).version == 4
            assert is_valid_uuid_token(token)

    def test_tokens_do_not_repeat(self) -> None:
        generator = TokenGenerator()
        tokens = {generator.new_polling_token() for _ in range(1000)}
        assert len(tokens) == 1000

    @pytest.mark.parametrize(
        "value",
        [
            None,
            42,
            "",
            "not-a-uuid",
            "0F0E6C6A-3D3B-4C2A-9E8F-1A2B3C4D5E6F",
            "0f0e6c6a3d3b4c2a9e8f1a2b3c4d5e6f",
        ],
    )
    def test_rejects_non_canonical_values(self, value: object) -> None:
        assert not is_valid_uuid_token(value)
