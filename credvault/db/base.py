"""
Key-Value Store Capability
==========================

Persistence interface for Secret Items keyed by (name, version).

Required Semantics:
    - put_item_if_absent is atomic: of two concurrent inserts of the same
      key exactly one succeeds, the other raises ConditionalCheckFailedError
    - query orders by the version attribute using the store's native
      (string) ordering
    - scan_keys returns every (name, version) pair, following pagination
      to the end
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union


@dataclass(frozen=True, slots=True)
class SecretRecord:
    """
    One persisted Secret Item, in its stored textual form.

    Attributes:
        name: Secret name (partition key)
        version: Version label as stored (sort key)
        key: base64 of the wrapped key material
        contents: base64 of the ciphertext
        hmac: hex of the HMAC tag; bytes when held in a binary attribute
    """

    name: str
    version: str
    key: str
    contents: str
    hmac: Union[str, bytes]

    def __repr__(self) -> str:
        """Safe representation without stored material."""
        return f"SecretRecord(name={self.name!r}, version={self.version!r})"


class KeyValueStore(ABC):
    """Interface to the backing consistent key-value store."""

    @abstractmethod
    def get_item(self, name: str, version: str) -> Optional[SecretRecord]:
        """Point read of one exact item; None if absent."""

    @abstractmethod
    def put_item_if_absent(self, record: SecretRecord) -> None:
        """
        Insert a record unless (name, version) already exists.

        Raises:
            ConditionalCheckFailedError: If the key is already stored
        """

    @abstractmethod
    def delete_item(self, name: str, version: str) -> None:
        """Delete one exact item. Deleting an absent item is not an error."""

    @abstractmethod
    def query(
        self,
        name: str,
        descending: bool = True,
        limit: Optional[int] = None,
        consistent: bool = True,
    ) -> List[SecretRecord]:
        """Items stored for name, ordered by version."""

    @abstractmethod
    def scan_keys(self) -> Iterator[Tuple[str, str]]:
        """Every stored (name, version) pair, in no particular order."""
