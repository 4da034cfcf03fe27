"""Content identifiers.

An identifier is the first ``length`` characters of the base58 encoding
(bitcoin alphabet) of the content's 256-bit blake3 digest. It depends on the
bytes alone, so re-uploading the same content always yields the same URL.

Only the prefix is used as a storage key. Distinct content sharing a prefix
is treated as already stored; at 8 base58 characters that risk is accepted.
"""

import base58
import blake3

from upld.config import LIMITS

BASE58_ALPHABET = base58.BITCOIN_ALPHABET.decode("ascii")


def content_hash(data: bytes) -> str:
    """Full base58-encoded blake3 digest of ``data``."""
    return base58.b58encode(blake3.blake3(data).digest()).decode("ascii")


def derive_identifier(data: bytes, length: int = LIMITS.id_length) -> str:
    """Derive the public identifier for ``data``."""
    return content_hash(data)[:length]


def is_identifier(candidate: str, length: int = LIMITS.id_length) -> bool:
    """Whether ``candidate`` has the shape of an identifier.

    Only the length is checked, matching how retrieval treats anything else
    as simply absent.
    """
    return len(candidate) == length
