"""
credvault - Envelope-Encrypted Credential Store
===============================================

Secrets are encrypted client-side under per-secret keys minted by a
key-management service, authenticated with HMAC, versioned, and stored
in a consistent key-value store.

Security Notice:
- No secrets are logged
- Fail-closed design pattern: integrity is verified before decryption
- Every stored item gets fresh, never reused key material
"""

from credvault.core.config import VaultConfig
from credvault.core.errors import (
    CredVaultError,
    EncryptionContextMismatch,
    EncryptionContextRequired,
    IntegrityCheckFailed,
    ItemNotFound,
    PayloadNotText,
    VersionAlreadyExists,
)
from credvault.core.logging import configure_logging, get_secure_logger
from credvault.core.store import (
    CredentialStore,
    RetrievalResult,
    build_local_store,
    build_store,
    get_all,
    get_matching,
    is_pattern,
)

__version__ = "0.1.0"
__author__ = "credvault Team"

__all__ = [
    "VaultConfig",
    "CredentialStore",
    "RetrievalResult",
    "build_store",
    "build_local_store",
    "get_matching",
    "get_all",
    "is_pattern",
    "configure_logging",
    "get_secure_logger",
    "CredVaultError",
    "ItemNotFound",
    "EncryptionContextRequired",
    "EncryptionContextMismatch",
    "IntegrityCheckFailed",
    "PayloadNotText",
    "VersionAlreadyExists",
    "__version__",
]
