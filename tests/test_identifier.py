"""Tests for content identifier derivation."""

import base58
import blake3

from upld.identifier import BASE58_ALPHABET, content_hash, derive_identifier, is_identifier


class TestDeriveIdentifier:
    def test_known_vector(self) -> None:
        # blake3("") = af1349b9...e41f3262
        assert content_hash(b"") == "CnRQX8RHiCM1krnQRbGMXaXPm6egnqUrV2ZiJLk7XPmb"
        assert derive_identifier(b"") == "CnRQX8RH"

    def test_is_prefix_of_base58_blake3(self) -> None:
        data = b"the quick brown fox jumps over the lazy dog"
        expected = base58.b58encode(blake3.blake3(data).digest()).decode()[:8]
        assert derive_identifier(data) == expected

    def test_fixed_length(self) -> None:
        for data in (b"a", b"a" * 32, bytes(range(256)) * 100):
            assert len(derive_identifier(data)) == 8

    def test_uses_base58_alphabet_only(self) -> None:
        identifier = derive_identifier(bytes(range(256)))
        assert set(identifier) <= set(BASE58_ALPHABET)
        for ambiguous in "0OIl":
            assert ambiguous not in BASE58_ALPHABET

    def test_deterministic(self) -> None:
        data = b"same bytes, any time, any platform, same id"
        assert derive_identifier(data) == derive_identifier(bytes(data))

    def test_different_content_different_identifier(self) -> None:
        assert derive_identifier(b"x" * 40) != derive_identifier(b"y" * 40)

    def test_custom_length(self) -> None:
        data = b"custom length identifiers are prefixes of the same hash"
        assert derive_identifier(data, length=12).startswith(derive_identifier(data))


class TestIsIdentifier:
    def test_exact_length(self) -> None:
        assert is_identifier("abcdefgh")

    def test_wrong_lengths(self) -> None:
        for candidate in ("", "abcdefg", "abcdefghi", "health"):
            assert not is_identifier(candidate)
