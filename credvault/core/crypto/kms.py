"""
Key Management Capability
=========================

Wraps and unwraps per-item key material under a named master key.

Implementations:
    - LocalKeyManagement: in-process master keys, AES-256-GCM wrapping
      with the encryption context bound as associated data
    - AwsKeyManagement: AWS KMS through a boto3 client

Both report a rejected wrapped blob (corrupt, wrong key, wrong or missing
encryption context) as InvalidCiphertextError. Any other failure from the
service client propagates unchanged.
"""

from __future__ import annotations

import json
import secrets
import struct
import threading
from abc import ABC, abstractmethod
from typing import Any, Final, Mapping, Optional, Tuple

from botocore.exceptions import ClientError
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from credvault.core.errors import InvalidCiphertextError

WRAP_MAGIC: Final[bytes] = b"CVLK"  # credvault local key
WRAP_NONCE_SIZE: Final[int] = 12
MASTER_KEY_SIZE: Final[int] = 32

_INVALID_CIPHERTEXT_CODE: Final[str] = "InvalidCiphertextException"


class KeyManagement(ABC):
    """Interface to an external key-management service."""

    @abstractmethod
    def generate_data_key(
        self,
        key_id: str,
        context: Optional[Mapping[str, str]],
        num_bytes: int,
    ) -> Tuple[bytes, bytes]:
        """
        Mint fresh random key material bound to key_id and context.

        Returns:
            Tuple of (plaintext_material, wrapped_material)
        """

    @abstractmethod
    def decrypt(
        self,
        wrapped: bytes,
        context: Optional[Mapping[str, str]],
    ) -> bytes:
        """
        Recover plaintext key material from its wrapped form.

        Raises:
            InvalidCiphertextError: If the blob or context is rejected
        """


def _context_aad(context: Optional[Mapping[str, str]]) -> bytes:
    """Canonical bytes of an encryption context (absent == empty)."""
    return json.dumps(dict(context or {}), sort_keys=True, separators=(",", ":")).encode("utf-8")


class LocalKeyManagement(KeyManagement):
    """
    In-process key management.

    Master keys live only in memory. Wrapped material has the layout:

        MAGIC (4) | KEY_ID_LEN (1) | KEY_ID | NONCE (12) | GCM_CIPHERTEXT

    The encryption context is the GCM associated data, so any context
    difference fails authentication exactly like the real service.

    Usage:
        kms = LocalKeyManagement()
        kms.create_key("alias/credstash")
    """

    __slots__ = ("_keys", "_auto_create", "_lock")

    def __init__(
        self,
        keys: Optional[Mapping[str, bytes]] = None,
        auto_create: bool = True,
    ) -> None:
        """
        Args:
            keys: Initial master keys by key id (32 bytes each)
            auto_create: Create a master key on first use of an unknown id
        """
        self._keys: dict[str, bytes] = {}
        self._auto_create = auto_create
        self._lock = threading.Lock()
        for key_id, key in (keys or {}).items():
            self._add_key(key_id, key)

    def create_key(self, key_id: str) -> None:
        """Create a random master key under key_id if it does not exist."""
        with self._lock:
            if key_id not in self._keys:
                self._keys[key_id] = secrets.token_bytes(MASTER_KEY_SIZE)

    def _add_key(self, key_id: str, key: bytes) -> None:
        if len(key) != MASTER_KEY_SIZE:
            raise ValueError(f"Master key must be exactly {MASTER_KEY_SIZE} bytes")
        if not 0 < len(key_id.encode("utf-8")) < 256:
            raise ValueError("Key id must be 1-255 bytes")
        self._keys[key_id] = key

    def _master_key(self, key_id: str) -> bytes:
        with self._lock:
            key = self._keys.get(key_id)
            if key is None:
                if not self._auto_create:
                    raise KeyError(f"Unknown master key: {key_id}")
                key = secrets.token_bytes(MASTER_KEY_SIZE)
                self._keys[key_id] = key
            return key

    def generate_data_key(
        self,
        key_id: str,
        context: Optional[Mapping[str, str]],
        num_bytes: int,
    ) -> Tuple[bytes, bytes]:
        key_id_bytes = key_id.encode("utf-8")
        if not 0 < len(key_id_bytes) < 256:
            raise ValueError("Key id must be 1-255 bytes")
        master = self._master_key(key_id)

        plaintext = secrets.token_bytes(num_bytes)
        nonce = secrets.token_bytes(WRAP_NONCE_SIZE)
        sealed = AESGCM(master).encrypt(nonce, plaintext, _context_aad(context))

        wrapped = b"".join([
            WRAP_MAGIC,
            struct.pack("<B", len(key_id_bytes)),
            key_id_bytes,
            nonce,
            sealed,
        ])
        return plaintext, wrapped

    def decrypt(
        self,
        wrapped: bytes,
        context: Optional[Mapping[str, str]],
    ) -> bytes:
        if len(wrapped) < 5 or wrapped[:4] != WRAP_MAGIC:
            raise InvalidCiphertextError("Wrapped key has bad magic bytes")

        offset = 4
        key_id_len = struct.unpack_from("<B", wrapped, offset)[0]
        offset += 1
        key_id_bytes = wrapped[offset : offset + key_id_len]
        offset += key_id_len
        nonce = wrapped[offset : offset + WRAP_NONCE_SIZE]
        offset += WRAP_NONCE_SIZE
        sealed = wrapped[offset:]

        if len(key_id_bytes) != key_id_len or len(nonce) != WRAP_NONCE_SIZE:
            raise InvalidCiphertextError("Wrapped key is truncated")

        try:
            key_id = key_id_bytes.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidCiphertextError("Wrapped key has a malformed key id") from e

        with self._lock:
            master = self._keys.get(key_id)
        if master is None:
            raise InvalidCiphertextError("Wrapped key references an unknown master key")

        try:
            return AESGCM(master).decrypt(nonce, sealed, _context_aad(context))
        except InvalidTag as e:
            raise InvalidCiphertextError("Wrapped key failed authentication") from e

    def __repr__(self) -> str:
        """Safe representation without key material."""
        return f"LocalKeyManagement(keys={len(self._keys)})"


class AwsKeyManagement(KeyManagement):
    """
    AWS KMS capability.

    The client is created once by the caller (``boto3.client("kms")``)
    and reused for every call.
    """

    __slots__ = ("_client",)

    def __init__(self, client: Any) -> None:
        self._client = client

    @staticmethod
    def _context_kwargs(context: Optional[Mapping[str, str]]) -> dict[str, Any]:
        if not context:
            return {}
        return {"EncryptionContext": dict(context)}

    def generate_data_key(
        self,
        key_id: str,
        context: Optional[Mapping[str, str]],
        num_bytes: int,
    ) -> Tuple[bytes, bytes]:
        try:
            resp = self._client.generate_data_key(
                KeyId=key_id,
                NumberOfBytes=num_bytes,
                **self._context_kwargs(context),
            )
        except ClientError as e:
            _raise_if_invalid_ciphertext(e)
            raise
        return resp["Plaintext"], resp["CiphertextBlob"]

    def decrypt(
        self,
        wrapped: bytes,
        context: Optional[Mapping[str, str]],
    ) -> bytes:
        try:
            resp = self._client.decrypt(
                CiphertextBlob=wrapped,
                **self._context_kwargs(context),
            )
        except ClientError as e:
            _raise_if_invalid_ciphertext(e)
            raise
        return resp["Plaintext"]


def _raise_if_invalid_ciphertext(error: ClientError) -> None:
    """Translate the service's invalid-ciphertext code into the typed error."""
    code = error.response.get("Error", {}).get("Code")
    if code == _INVALID_CIPHERTEXT_CODE:
        raise InvalidCiphertextError(str(error)) from error
