"""
AES-256-CTR Payload Encryption
==============================

Stream encryption of secret payloads under a per-item data key.

Security Properties:
    - 256-bit key, freshly generated for every stored item
    - Fixed initial counter block (value 1)
    - No built-in authentication: ciphertext integrity is provided by
      the separate HMAC in hmac_auth

Fixed Counter:
    CTR keystream reuse happens only when (key, counter) repeats. The
    counter is constant, so a data key must encrypt exactly one payload.
    The envelope layer mints a new key per put.

WARNING:
    - Never encrypt two payloads under the same data key
    - Always verify the HMAC before decrypting
"""

from __future__ import annotations

from typing import Final

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

AES_KEY_SIZE: Final[int] = 32  # 256 bits
AES_BLOCK_SIZE: Final[int] = 16
INITIAL_COUNTER: Final[bytes] = (1).to_bytes(AES_BLOCK_SIZE, "big")


class AesCtrCipher:
    """
    AES-256 in counter mode with a fixed initial counter.

    Usage:
        cipher = AesCtrCipher()
        ciphertext = cipher.encrypt(b"secret", data_key)
        plaintext = cipher.decrypt(ciphertext, data_key)

    Encryption and decryption are the same keystream XOR.
    """

    __slots__ = ()

    def encrypt(self, plaintext: bytes, key: bytes) -> bytes:
        """
        Encrypt plaintext under a single-use data key.

        Raises:
            ValueError: If key is not 32 bytes
        """
        return self._apply_keystream(plaintext, key)

    def decrypt(self, ciphertext: bytes, key: bytes) -> bytes:
        """
        Decrypt ciphertext produced by encrypt().

        Raises:
            ValueError: If key is not 32 bytes
        """
        return self._apply_keystream(ciphertext, key)

    @staticmethod
    def _apply_keystream(data: bytes, key: bytes) -> bytes:
        if len(key) != AES_KEY_SIZE:
            raise ValueError(f"Key must be exactly {AES_KEY_SIZE} bytes")
        cipher = Cipher(algorithms.AES(key), modes.CTR(INITIAL_COUNTER))
        ctx = cipher.encryptor()
        return ctx.update(data) + ctx.finalize()
