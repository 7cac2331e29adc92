"""
Credential Store Driver
=======================

Versioned, envelope-encrypted secrets over a key-value capability.

Operations:
    - put: seal a payload and insert it under (name, version), refusing
      to overwrite an existing version
    - get: read the newest or an exact version, verify, decrypt
    - delete: remove one version, or every version of a name
    - list: every stored (name, version) pair, no decryption
    - highest_version: numeric value of the newest version, 0 if none

Each call is an independent unit of work. Nothing is retried here:
capability errors reach the caller after a single attempt.

Versions:
    Labels are persisted zero-padded (see codec.format_version) so the
    store's descending string order is also numeric order.
"""

from __future__ import annotations

import logging
from typing import Final, List, Mapping, Optional, Tuple, Union

from credvault.core.codec import (
    decode_binary,
    decode_mac,
    encode_binary,
    encode_mac,
    format_version,
    parse_int,
)
from credvault.core.crypto.envelope import EnvelopeCrypto, SealedSecret
from credvault.core.crypto.kms import KeyManagement
from credvault.core.errors import (
    ConditionalCheckFailedError,
    IntegrityCheckFailed,
    ItemNotFound,
    PayloadNotText,
    VersionAlreadyExists,
)
from credvault.db.base import KeyValueStore, SecretRecord
from credvault.utils.validators import validate_secret_name

DEFAULT_WRAPPING_KEY: Final[str] = "alias/credstash"
DEFAULT_VERSION: Final[int] = 1

Context = Optional[Mapping[str, str]]
VersionArg = Optional[Union[int, str]]


class CredentialStore:
    """
    Store Driver for encrypted, versioned credentials.

    The two capabilities are long-lived objects built once by the caller
    and shared by every operation.

    Usage:
        store = CredentialStore(MemoryKeyValueStore(), LocalKeyManagement())
        store.put("db-password", "hunter2", context={"env": "prod"})
        value = store.get("db-password", context={"env": "prod"})
    """

    __slots__ = ("_kv", "_crypto", "_wrapping_key_id", "_parallel_workers", "_log")

    def __init__(
        self,
        kv_store: KeyValueStore,
        kms: KeyManagement,
        wrapping_key_id: str = DEFAULT_WRAPPING_KEY,
        parallel_workers: int = 1,
    ) -> None:
        self._kv = kv_store
        self._crypto = EnvelopeCrypto(kms)
        self._wrapping_key_id = wrapping_key_id
        self._parallel_workers = max(1, parallel_workers)
        self._log = logging.getLogger("credvault.driver")

    @property
    def wrapping_key_id(self) -> str:
        """Master key used when put() is not given one."""
        return self._wrapping_key_id

    @property
    def parallel_workers(self) -> int:
        """Default fan-out for wildcard lookups."""
        return self._parallel_workers

    def put(
        self,
        name: str,
        secret: Union[str, bytes],
        version: VersionArg = None,
        context: Context = None,
        wrapping_key_id: Optional[str] = None,
        auto_version: bool = False,
    ) -> int:
        """
        Encrypt and store a new version of a secret.

        Args:
            name: Secret name
            secret: Plaintext (text is stored as UTF-8)
            version: Version to create (default 1)
            context: Encryption context bound to the wrapped key
            wrapping_key_id: Master key override
            auto_version: Store as the current highest version + 1

        Returns:
            The version number stored

        Raises:
            VersionAlreadyExists: (name, version) is already stored; carries
                the current highest version
        """
        validate_secret_name(name)
        if auto_version:
            number = self.highest_version(name) + 1
        elif version is None:
            number = DEFAULT_VERSION
        else:
            number = self._version_number(version)
        label = format_version(number)

        payload = secret.encode("utf-8") if isinstance(secret, str) else secret
        key_id = wrapping_key_id or self._wrapping_key_id
        sealed = self._crypto.seal(payload, key_id, context)

        record = SecretRecord(
            name=name,
            version=label,
            key=encode_binary(sealed.wrapped_key),
            contents=encode_binary(sealed.ciphertext),
            hmac=encode_mac(sealed.mac),
        )
        try:
            self._kv.put_item_if_absent(record)
        except ConditionalCheckFailedError as e:
            highest = self.highest_version(name)
            self._log.info("Version %d of %s already exists (highest %d)", number, name, highest)
            raise VersionAlreadyExists(name, highest) from e

        self._log.info("Stored %s -- version %d", name, number)
        return number

    def get(
        self,
        name: str,
        version: VersionArg = None,
        context: Context = None,
    ) -> str:
        """
        Fetch, verify and decrypt a secret.

        Args:
            name: Secret name
            version: Exact version, or None for the newest
            context: Encryption context used when the secret was stored

        Raises:
            ItemNotFound: Nothing stored for name (and version)
            EncryptionContextRequired: Context needed but not given
            EncryptionContextMismatch: Context differs from the stored one
            IntegrityCheckFailed: Stored HMAC does not match
            PayloadNotText: Plaintext is binary (use get_bytes)
        """
        payload = self.get_bytes(name, version, context)
        try:
            return payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise PayloadNotText(name) from e

    def get_bytes(
        self,
        name: str,
        version: VersionArg = None,
        context: Context = None,
    ) -> bytes:
        """Like get() but returns the raw plaintext bytes."""
        record = self._fetch(name, version)
        return self._open(record, context)

    def _fetch(self, name: str, version: VersionArg) -> SecretRecord:
        if version is None:
            records = self._kv.query(name, descending=True, limit=1, consistent=True)
            if not records:
                raise ItemNotFound(name)
            return records[0]

        number = self._version_number(version)
        record = self._kv.get_item(name, format_version(number))
        if record is None:
            raise ItemNotFound(name, number)
        return record

    def _open(self, record: SecretRecord, context: Context) -> bytes:
        try:
            sealed = SealedSecret(
                wrapped_key=decode_binary(record.key),
                ciphertext=decode_binary(record.contents),
                mac=decode_mac(record.hmac),
            )
        except ValueError as e:
            self._log.warning("Stored item %r is malformed", record)
            raise IntegrityCheckFailed(record.name) from e
        return self._crypto.open(sealed, context, name=record.name)

    def delete(self, name: str, version: VersionArg = None) -> List[Tuple[str, int]]:
        """
        Delete one version of a secret, or all of them.

        Deletions are issued one item at a time. A failure stops the loop
        and propagates; items already deleted stay deleted.

        Returns:
            The (name, version) pairs deleted, in deletion order

        Raises:
            ItemNotFound: Nothing to delete
        """
        if version is None:
            records = self._kv.query(name, descending=False, consistent=True)
            if not records:
                raise ItemNotFound(name)
            targets = [(r.name, r.version) for r in records]
        else:
            number = self._version_number(version)
            label = format_version(number)
            if self._kv.get_item(name, label) is None:
                raise ItemNotFound(name, number)
            targets = [(name, label)]

        deleted: List[Tuple[str, int]] = []
        for target_name, label in targets:
            self._kv.delete_item(target_name, label)
            number = parse_int(label)
            self._log.info("Deleting %s -- version %d", target_name, number)
            deleted.append((target_name, number))
        return deleted

    def list(self) -> List[Tuple[str, str]]:
        """
        Every stored (name, version) pair.

        The full table is read; callers filtering by name must expect a
        large result.
        """
        return list(self._kv.scan_keys())

    def names(self) -> List[str]:
        """Distinct stored names, sorted."""
        return sorted({name for name, _ in self.list()})

    def highest_version(self, name: str) -> int:
        """Numeric value of the newest version of name, or 0 if none."""
        records = self._kv.query(name, descending=True, limit=1, consistent=True)
        if not records:
            return 0
        return parse_int(records[0].version)

    @staticmethod
    def _version_number(version: Union[int, str]) -> int:
        if isinstance(version, int) and not isinstance(version, bool):
            return version
        return parse_int(str(version))

    def __repr__(self) -> str:
        return f"CredentialStore(kv={self._kv!r}, wrapping_key_id={self._wrapping_key_id!r})"
