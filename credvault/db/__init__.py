"""
Database module - Persistence of encrypted Secret Items.

Security Considerations:
- Only wrapped keys, ciphertext and HMAC tags are persisted
- No plaintext secrets in the store
"""

from credvault.db.base import KeyValueStore, SecretRecord
from credvault.db.dynamodb import DynamoDBKeyValueStore
from credvault.db.memory import MemoryKeyValueStore

__all__ = [
    "KeyValueStore",
    "SecretRecord",
    "MemoryKeyValueStore",
    "DynamoDBKeyValueStore",
]
