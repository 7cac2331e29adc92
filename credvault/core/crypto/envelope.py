"""
Envelope Encryption Engine
==========================

Confidentiality and integrity for one secret payload, independent of how
the result is stored.

Encryption Flow:
    key management generate_data_key (64 bytes)
        ↓ split
    data_key (32) | integrity_key (32)
    plaintext
        ↓ AES-256-CTR (data_key)
    ciphertext
        ↓ HMAC-SHA256 (integrity_key)
    tag
    sealed = wrapped_key + ciphertext + tag

Decryption Flow:
    wrapped_key
        ↓ key management decrypt (encryption context)
    data_key | integrity_key
    ciphertext, tag
        ↓ verify HMAC (constant time)
        ↓ AES-256-CTR (data_key)
    plaintext

WARNING:
    - Every seal mints new key material; never re-encrypt under old keys
    - HMAC must verify before any plaintext is produced (fail-closed)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, Mapping, Optional, Tuple

from credvault.core.crypto.aes_ctr import AES_KEY_SIZE, AesCtrCipher
from credvault.core.crypto.hmac_auth import HMAC_KEY_SIZE, compute_mac, verify_mac
from credvault.core.crypto.kms import KeyManagement
from credvault.core.errors import (
    EncryptionContextMismatch,
    EncryptionContextRequired,
    IntegrityCheckFailed,
    InvalidCiphertextError,
)

ENVELOPE_KEY_BYTES: Final[int] = AES_KEY_SIZE + HMAC_KEY_SIZE


@dataclass(frozen=True, slots=True)
class Envelope:
    """
    Freshly minted key material for one item.

    Attributes:
        data_key: Encrypts the payload
        integrity_key: Keys the HMAC over the ciphertext
        wrapped_key: Both keys wrapped by key management, safe to store
    """

    data_key: bytes
    integrity_key: bytes
    wrapped_key: bytes

    def __repr__(self) -> str:
        """Safe representation without key material."""
        return f"Envelope(wrapped_len={len(self.wrapped_key)})"


@dataclass(frozen=True, slots=True)
class SealedSecret:
    """Storage-independent result of sealing one payload."""

    wrapped_key: bytes
    ciphertext: bytes
    mac: bytes

    def __repr__(self) -> str:
        return f"SealedSecret(ct_len={len(self.ciphertext)})"


class EnvelopeCrypto:
    """
    Envelope encryption over a key-management capability.

    Usage:
        engine = EnvelopeCrypto(kms)
        sealed = engine.seal(b"hunter2", "alias/credstash", {"env": "prod"})
        plaintext = engine.open(sealed, {"env": "prod"}, name="db-password")
    """

    __slots__ = ("_kms", "_cipher", "_log")

    def __init__(self, kms: KeyManagement) -> None:
        self._kms = kms
        self._cipher = AesCtrCipher()
        self._log = logging.getLogger("credvault.crypto")

    def generate_envelope(
        self,
        wrapping_key_id: str,
        context: Optional[Mapping[str, str]] = None,
    ) -> Envelope:
        """
        Mint independent data and integrity keys bound to a master key.

        The two keys are the halves of one random 64-byte generation, so
        they never share bytes.
        """
        plaintext, wrapped = self._kms.generate_data_key(
            wrapping_key_id, context, ENVELOPE_KEY_BYTES
        )
        if len(plaintext) != ENVELOPE_KEY_BYTES:
            raise ValueError(
                f"Key management returned {len(plaintext)} bytes, expected {ENVELOPE_KEY_BYTES}"
            )
        self._log.debug("Generated envelope under %s", wrapping_key_id)
        return Envelope(
            data_key=plaintext[:AES_KEY_SIZE],
            integrity_key=plaintext[AES_KEY_SIZE:],
            wrapped_key=wrapped,
        )

    def unwrap_envelope(
        self,
        wrapped_key: bytes,
        context: Optional[Mapping[str, str]] = None,
        name: str = "",
    ) -> Tuple[bytes, bytes]:
        """
        Recover (data_key, integrity_key) from wrapped material.

        Raises:
            EncryptionContextRequired: Rejected and no context was given
            EncryptionContextMismatch: Rejected and a context was given
        """
        try:
            plaintext = self._kms.decrypt(wrapped_key, context)
        except InvalidCiphertextError as e:
            if not context:
                raise EncryptionContextRequired(name) from e
            raise EncryptionContextMismatch(name) from e
        if len(plaintext) != ENVELOPE_KEY_BYTES:
            raise ValueError(
                f"Unwrapped key material is {len(plaintext)} bytes, expected {ENVELOPE_KEY_BYTES}"
            )
        return plaintext[:AES_KEY_SIZE], plaintext[AES_KEY_SIZE:]

    def encrypt(self, plaintext: bytes, data_key: bytes) -> bytes:
        return self._cipher.encrypt(plaintext, data_key)

    def decrypt(self, ciphertext: bytes, data_key: bytes) -> bytes:
        return self._cipher.decrypt(ciphertext, data_key)

    @staticmethod
    def mac(ciphertext: bytes, integrity_key: bytes) -> bytes:
        return compute_mac(ciphertext, integrity_key)

    @staticmethod
    def verify(ciphertext: bytes, tag: bytes, integrity_key: bytes) -> bool:
        return verify_mac(ciphertext, tag, integrity_key)

    def seal(
        self,
        plaintext: bytes,
        wrapping_key_id: str,
        context: Optional[Mapping[str, str]] = None,
    ) -> SealedSecret:
        """Encrypt and authenticate a payload under new envelope keys."""
        envelope = self.generate_envelope(wrapping_key_id, context)
        ciphertext = self.encrypt(plaintext, envelope.data_key)
        return SealedSecret(
            wrapped_key=envelope.wrapped_key,
            ciphertext=ciphertext,
            mac=self.mac(ciphertext, envelope.integrity_key),
        )

    def open(
        self,
        sealed: SealedSecret,
        context: Optional[Mapping[str, str]] = None,
        name: str = "",
    ) -> bytes:
        """
        Verify and decrypt a sealed payload.

        Raises:
            EncryptionContextRequired: Context missing
            EncryptionContextMismatch: Context differs from the stored one
            IntegrityCheckFailed: HMAC does not match the ciphertext
        """
        data_key, integrity_key = self.unwrap_envelope(sealed.wrapped_key, context, name)
        if not self.verify(sealed.ciphertext, sealed.mac, integrity_key):
            self._log.warning("HMAC verification failed for %s", name)
            raise IntegrityCheckFailed(name)
        return self.decrypt(sealed.ciphertext, data_key)
