"""
Wildcard Retrieval
==================

Resolves a shell-glob name pattern against every stored name and fetches
the secrets that match.

Failure Policy:
    Each matched name is fetched independently. A per-name failure of the
    credential store's own kinds (not found, integrity, context, binary
    payload) does not abort the others: it is recorded in
    RetrievalResult.failures and the name is left out of
    RetrievalResult.values. The caller decides whether to surface those
    failures (raise_on_failure). Transport errors from the
    capabilities are not absorbed.
"""

from __future__ import annotations

import fnmatch
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple, Union

from credvault.core.codec import format_version, to_json
from credvault.core.errors import CredVaultError
from credvault.core.store.driver import CredentialStore

_log = logging.getLogger("credvault.multi")

WILDCARD = "*"


@dataclass
class RetrievalResult:
    """
    Outcome of a wildcard lookup.

    Attributes:
        values: Matched name to decrypted plaintext
        failures: (name, error) for matched names that could not be read
    """

    values: Dict[str, str] = field(default_factory=dict)
    failures: List[Tuple[str, CredVaultError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_on_failure(self) -> None:
        """Raise the first recorded failure, if any."""
        if self.failures:
            raise self.failures[0][1]

    def to_json(self) -> str:
        """The values mapping as a JSON object."""
        return to_json(self.values)

    def __repr__(self) -> str:
        """Safe representation without plaintext."""
        return f"RetrievalResult(values={sorted(self.values)}, failures={[n for n, _ in self.failures]})"


def is_pattern(name: str) -> bool:
    """Whether name should be resolved as a wildcard pattern."""
    return WILDCARD in name


def match_names(names: List[str], pattern: str) -> List[str]:
    """Distinct names matching a shell-glob pattern, sorted."""
    return sorted(n for n in set(names) if fnmatch.fnmatchcase(n, pattern))


def get_matching(
    store: CredentialStore,
    pattern: str,
    version: Optional[Union[int, str]] = None,
    context: Optional[Mapping[str, str]] = None,
    max_workers: Optional[int] = None,
) -> RetrievalResult:
    """
    Fetch every secret whose name matches pattern.

    Args:
        store: Credential store to read from
        pattern: Shell-glob pattern ('*' matches any run of characters)
        version: Version to read for every match (None for newest)
        context: Encryption context used for every match
        max_workers: Fetch in parallel when greater than 1 (default:
            the store's parallel_workers)

    Returns:
        RetrievalResult with values and per-name failures
    """
    if version is not None:
        # an invalid version would fail every name the same way
        format_version(version)

    names = match_names([name for name, _ in store.list()], pattern)
    _log.debug("Pattern %r matched %d names", pattern, len(names))

    def fetch(name: str) -> Tuple[str, Optional[str], Optional[CredVaultError]]:
        try:
            return name, store.get(name, version, context), None
        except CredVaultError as e:
            return name, None, e

    if max_workers is None:
        max_workers = store.parallel_workers
    if max_workers > 1 and len(names) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(fetch, names))
    else:
        outcomes = [fetch(name) for name in names]

    result = RetrievalResult()
    for name, value, error in outcomes:
        if error is not None:
            _log.warning("Skipping %s: %s", name, type(error).__name__)
            result.failures.append((name, error))
        else:
            result.values[name] = value
    return result


def get_all(
    store: CredentialStore,
    version: Optional[Union[int, str]] = None,
    context: Optional[Mapping[str, str]] = None,
    max_workers: Optional[int] = None,
) -> RetrievalResult:
    """Fetch every stored secret."""
    return get_matching(store, WILDCARD, version, context, max_workers)
