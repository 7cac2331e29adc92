"""
Secure Configuration Module
===========================

Provides immutable, environment-aware configuration with security-first defaults.

Security Features:
- Immutable configuration after initialization
- Environment variable override support
- No secrets in default values
- Type-safe configuration access
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from typing import Any, Final, Optional


# Security Constants
_SENSITIVE_KEYS: Final[frozenset[str]] = frozenset({
    "password", "secret", "token", "api_key",
    "private", "credential", "auth", "salt"
})


def _is_sensitive_key(key: str) -> bool:
    """Check if a configuration key might contain sensitive data."""
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS)


@dataclass(frozen=True, slots=True)
class StoreConfig:
    """Immutable key-value store configuration."""

    table: str = "credential-store"
    region: Optional[str] = None  # None defers to the AWS default chain
    parallel_workers: int = 8  # wildcard lookups

    def __post_init__(self) -> None:
        """Validate store settings."""
        if not 3 <= len(self.table) <= 255:
            raise ValueError("Table name must be 3-255 characters")
        if self.parallel_workers < 1:
            raise ValueError("Parallel workers must be at least 1")


@dataclass(frozen=True, slots=True)
class KmsConfig:
    """Immutable key-management configuration."""

    wrapping_alias: str = "alias/credstash"

    def __post_init__(self) -> None:
        """Validate key-management settings."""
        if not self.wrapping_alias:
            raise ValueError("Wrapping key alias cannot be empty")


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Immutable logging configuration."""

    level: str = "WARNING"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    enable_json: bool = False

    def __post_init__(self) -> None:
        """Validate logging settings."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.level.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {self.level}")


class VaultConfig:
    """
    Centralized, immutable configuration loader with environment override support.

    Usage:
        config = VaultConfig.load()
        table = config.store.table
        alias = config.kms.wrapping_alias
    """

    __slots__ = ("_store", "_kms", "_logging", "_frozen", "_config_hash")

    def __init__(
        self,
        store: Optional[StoreConfig] = None,
        kms: Optional[KmsConfig] = None,
        logging: Optional[LoggingConfig] = None,
    ) -> None:
        """Initialize configuration. Use VaultConfig.load() for standard initialization."""
        # Use object.__setattr__ to bypass our immutability check during init
        object.__setattr__(self, "_frozen", False)
        object.__setattr__(self, "_store", store or StoreConfig())
        object.__setattr__(self, "_kms", kms or KmsConfig())
        object.__setattr__(self, "_logging", logging or LoggingConfig())
        object.__setattr__(self, "_config_hash", self._compute_hash())
        object.__setattr__(self, "_frozen", True)

    def _compute_hash(self) -> str:
        """Compute a hash of the configuration for integrity checking."""
        config_str = f"{self._store}|{self._kms}|{self._logging}"
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @property
    def store(self) -> StoreConfig:
        """Get key-value store configuration."""
        return self._store

    @property
    def kms(self) -> KmsConfig:
        """Get key-management configuration."""
        return self._kms

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration."""
        return self._logging

    @property
    def config_hash(self) -> str:
        """Get configuration integrity hash."""
        return self._config_hash

    @classmethod
    def load(cls, env_prefix: str = "CREDVAULT") -> VaultConfig:
        """
        Load configuration with environment variable overrides.

        Environment variables are prefixed with CREDVAULT_ and use double
        underscores between section and field.

        Examples:
            CREDVAULT_STORE__TABLE=prod-credentials
            CREDVAULT_STORE__REGION=eu-west-1
            CREDVAULT_KMS__WRAPPING_ALIAS=alias/prod
            CREDVAULT_LOGGING__LEVEL=DEBUG

        Args:
            env_prefix: Prefix for environment variables (default: CREDVAULT)

        Returns:
            Configured VaultConfig instance
        """
        env_overrides = cls._parse_env_overrides(env_prefix)

        store_kwargs: dict[str, Any] = {}
        if "store.table" in env_overrides:
            store_kwargs["table"] = env_overrides["store.table"]
        if "store.region" in env_overrides:
            store_kwargs["region"] = env_overrides["store.region"] or None
        if "store.parallel_workers" in env_overrides:
            store_kwargs["parallel_workers"] = int(env_overrides["store.parallel_workers"])

        kms_kwargs: dict[str, Any] = {}
        if "kms.wrapping_alias" in env_overrides:
            kms_kwargs["wrapping_alias"] = env_overrides["kms.wrapping_alias"]

        logging_kwargs: dict[str, Any] = {}
        if "logging.level" in env_overrides:
            logging_kwargs["level"] = env_overrides["logging.level"]
        if "logging.enable_json" in env_overrides:
            logging_kwargs["enable_json"] = env_overrides["logging.enable_json"].lower() == "true"

        return cls(
            store=StoreConfig(**store_kwargs) if store_kwargs else None,
            kms=KmsConfig(**kms_kwargs) if kms_kwargs else None,
            logging=LoggingConfig(**logging_kwargs) if logging_kwargs else None,
        )

    @staticmethod
    def _parse_env_overrides(prefix: str) -> dict[str, str]:
        """Parse environment variables with the given prefix."""
        overrides: dict[str, str] = {}
        prefix_upper = f"{prefix.upper()}_"

        for key, value in os.environ.items():
            if key.startswith(prefix_upper):
                # Convert CREDVAULT_SECTION__KEY to section.key
                config_key = key[len(prefix_upper):].lower().replace("__", ".")

                # SECURITY: Skip sensitive keys from environment
                if _is_sensitive_key(config_key):
                    continue

                overrides[config_key] = value

        return overrides

    def __repr__(self) -> str:
        """Safe string representation without sensitive data."""
        return f"VaultConfig(hash={self._config_hash}, table={self._store.table})"

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent modification after initialization."""
        if hasattr(self, "_frozen") and self._frozen:
            raise AttributeError("VaultConfig is immutable after initialization")
        super().__setattr__(name, value)
