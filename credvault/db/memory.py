"""
In-process key-value store.

Thread-safe dict keyed by (name, version). Used for tests and local runs.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterator, List, Optional, Tuple

from credvault.core.errors import ConditionalCheckFailedError
from credvault.db.base import KeyValueStore, SecretRecord


class MemoryKeyValueStore(KeyValueStore):
    """Key-value capability held in memory."""

    __slots__ = ("_items", "_lock")

    def __init__(self) -> None:
        self._items: Dict[Tuple[str, str], SecretRecord] = {}
        self._lock = threading.Lock()

    def get_item(self, name: str, version: str) -> Optional[SecretRecord]:
        with self._lock:
            return self._items.get((name, version))

    def put_item_if_absent(self, record: SecretRecord) -> None:
        key = (record.name, record.version)
        with self._lock:
            if key in self._items:
                raise ConditionalCheckFailedError(
                    f"Item already exists: {record.name!r} version {record.version!r}"
                )
            self._items[key] = record

    def delete_item(self, name: str, version: str) -> None:
        with self._lock:
            self._items.pop((name, version), None)

    def query(
        self,
        name: str,
        descending: bool = True,
        limit: Optional[int] = None,
        consistent: bool = True,
    ) -> List[SecretRecord]:
        # every read is consistent here
        with self._lock:
            matches = [r for (n, _), r in self._items.items() if n == name]
        matches.sort(key=lambda r: r.version, reverse=descending)
        if limit is not None:
            matches = matches[:limit]
        return matches

    def scan_keys(self) -> Iterator[Tuple[str, str]]:
        with self._lock:
            keys = list(self._items)
        return iter(keys)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
