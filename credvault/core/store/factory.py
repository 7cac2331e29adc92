"""
Wiring of a CredentialStore from configuration.

The AWS clients are created once here and handed to the capabilities;
nothing is kept at module level.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3

from credvault.core.config import VaultConfig
from credvault.core.crypto.kms import AwsKeyManagement, LocalKeyManagement
from credvault.core.store.driver import CredentialStore
from credvault.db.dynamodb import DynamoDBKeyValueStore
from credvault.db.memory import MemoryKeyValueStore

_log = logging.getLogger("credvault.factory")


def build_store(
    config: Optional[VaultConfig] = None,
    session: Optional[Any] = None,
) -> CredentialStore:
    """
    Build a CredentialStore backed by DynamoDB and AWS KMS.

    Args:
        config: Configuration (default: VaultConfig.load())
        session: boto3 Session to create clients from (default: a new
            session in the configured region)
    """
    config = config or VaultConfig.load()
    if session is None:
        session = boto3.session.Session(region_name=config.store.region)

    _log.debug("Using table %s", config.store.table)
    kv_store = DynamoDBKeyValueStore(session.client("dynamodb"), config.store.table)
    kms = AwsKeyManagement(session.client("kms"))
    return CredentialStore(
        kv_store,
        kms,
        wrapping_key_id=config.kms.wrapping_alias,
        parallel_workers=config.store.parallel_workers,
    )


def build_local_store(config: Optional[VaultConfig] = None) -> CredentialStore:
    """Build a CredentialStore held entirely in process memory."""
    config = config or VaultConfig()
    kms = LocalKeyManagement()
    kms.create_key(config.kms.wrapping_alias)
    return CredentialStore(
        MemoryKeyValueStore(),
        kms,
        wrapping_key_id=config.kms.wrapping_alias,
        parallel_workers=config.store.parallel_workers,
    )
