"""Shared fixtures: a CredentialStore over the in-process capabilities."""

import pytest

from credvault.core.crypto.kms import LocalKeyManagement
from credvault.core.store.driver import CredentialStore
from credvault.db.memory import MemoryKeyValueStore

WRAPPING_KEY = "alias/test"


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def kms():
    local = LocalKeyManagement(auto_create=False)
    local.create_key(WRAPPING_KEY)
    return local


@pytest.fixture
def store(kv, kms):
    return CredentialStore(kv, kms, wrapping_key_id=WRAPPING_KEY)
