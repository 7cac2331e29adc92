"""
credvault Cryptographic Core
============================

Envelope encryption for stored credentials.

Architecture:
    1. Key management: wraps per-item key material under a master key
    2. AES-256-CTR: encrypts the payload under the per-item data key
    3. HMAC-SHA256: authenticates the ciphertext under the integrity key

Security Properties:
    - Fresh data and integrity keys for every stored item
    - Integrity verified before decryption (fail-closed)
    - Constant-time tag comparison
    - Encryption context bound into key wrapping

WARNING: This module handles sensitive cryptographic material.
         Incorrect usage can compromise security.
"""

from credvault.core.crypto.aes_ctr import AesCtrCipher
from credvault.core.crypto.envelope import Envelope, EnvelopeCrypto, SealedSecret
from credvault.core.crypto.kms import AwsKeyManagement, KeyManagement, LocalKeyManagement

__all__ = [
    "AesCtrCipher",
    "Envelope",
    "EnvelopeCrypto",
    "SealedSecret",
    "KeyManagement",
    "LocalKeyManagement",
    "AwsKeyManagement",
]
