"""
Ciphertext Authentication
=========================

HMAC-SHA256 over stored ciphertext, keyed by the per-item integrity key.
"""

from __future__ import annotations

from typing import Final

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac

HMAC_KEY_SIZE: Final[int] = 32
HMAC_TAG_SIZE: Final[int] = 32  # SHA-256 digest


def compute_mac(ciphertext: bytes, key: bytes) -> bytes:
    """Compute the HMAC-SHA256 tag of ciphertext."""
    h = crypto_hmac.HMAC(key, hashes.SHA256())
    h.update(ciphertext)
    return h.finalize()


def verify_mac(ciphertext: bytes, tag: bytes, key: bytes) -> bool:
    """
    Check a stored tag against ciphertext.

    Returns:
        True if the tag matches, False otherwise

    Security:
        Comparison is constant-time (HMAC.verify). A tag of the wrong
        length never matches.
    """
    if len(tag) != HMAC_TAG_SIZE:
        return False
    h = crypto_hmac.HMAC(key, hashes.SHA256())
    h.update(ciphertext)
    try:
        h.verify(tag)
    except InvalidSignature:
        return False
    return True
