"""
Credential storage: versioned driver, wildcard retrieval and wiring.
"""

from credvault.core.store.driver import CredentialStore
from credvault.core.store.factory import build_local_store, build_store
from credvault.core.store.multi import RetrievalResult, get_all, get_matching, is_pattern

__all__ = [
    "CredentialStore",
    "RetrievalResult",
    "build_local_store",
    "build_store",
    "get_all",
    "get_matching",
    "is_pattern",
]
