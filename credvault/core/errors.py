"""
Credential Store Errors
=======================

Typed failure conditions raised by the credential store.

Error Categories:
    - Not found: no item for the requested name/version
    - Integrity: stored HMAC does not match the ciphertext
    - Context: encryption context missing or not matching
    - Version conflict: conditional write lost against an existing version
    - Boundary: typed conditions reported by the capability backends

Transport errors raised by the backing service clients are never wrapped;
they reach the caller unchanged.
"""

from __future__ import annotations

import json
from typing import Optional


class CredVaultError(Exception):
    """Base class for all credential store failures."""
    pass


class ItemNotFound(CredVaultError):
    """No stored item matches the requested name (and version)."""

    def __init__(self, name: str, version: Optional[int] = None) -> None:
        self.name = name
        self.version = version
        if version is None:
            detail = f'{{"name": {json.dumps(name)}}}'
        else:
            detail = f'{{"name": {json.dumps(name)}, "version": {version}}}'
        super().__init__(f"item couldn't be found: {detail}")


class EncryptionContextRequired(CredVaultError):
    """The wrapped key needs an encryption context but none was supplied."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"{name}: could not decrypt HMAC key with KMS: the credential may "
            "require that an encryption context be provided to decrypt it"
        )


class EncryptionContextMismatch(CredVaultError):
    """The supplied encryption context differs from the one used on write."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"{name}: could not decrypt HMAC key with KMS: the encryption "
            "context provided may not match the one used when the credential "
            "was stored"
        )


class IntegrityCheckFailed(CredVaultError):
    """Computed HMAC does not match the stored HMAC."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name}: computed HMAC does not match stored HMAC")


class PayloadNotText(CredVaultError):
    """The decrypted payload is not UTF-8 text; read it with get_bytes()."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name}: stored payload is not UTF-8 text")


class VersionAlreadyExists(CredVaultError):
    """A put targeted a (name, version) pair that is already stored."""

    def __init__(self, name: str, current_highest: int) -> None:
        self.name = name
        self.current_highest = current_highest
        super().__init__(
            "version already in the credential store - specify a new version "
            f'(name: "{name}", version: {current_highest})'
        )


class InvalidVersionError(CredVaultError, ValueError):
    """Version text is not a non-negative decimal integer."""
    pass


class InvalidContextError(CredVaultError, ValueError):
    """Encryption context pair is not of the form key=value."""
    pass


# Capability boundary conditions


class InvalidCiphertextError(CredVaultError):
    """Key management rejected wrapped material (bad blob or context)."""
    pass


class ConditionalCheckFailedError(CredVaultError):
    """Key-value store refused a conditional insert (key already present)."""
    pass
