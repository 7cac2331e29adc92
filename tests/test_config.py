"""Tests for credvault.core.config: immutable configuration."""

import pytest

from credvault.core.config import KmsConfig, LoggingConfig, StoreConfig, VaultConfig


class TestDefaults:
    def test_store(self):
        store = StoreConfig()
        assert store.table == "credential-store"
        assert store.region is None
        assert store.parallel_workers == 8

    def test_kms(self):
        assert KmsConfig().wrapping_alias == "alias/credstash"

    def test_frozen(self):
        with pytest.raises(AttributeError):
            StoreConfig().table = "other"  # type: ignore[misc]


class TestValidation:
    def test_short_table(self):
        with pytest.raises(ValueError, match="Table name"):
            StoreConfig(table="ab")

    def test_workers(self):
        with pytest.raises(ValueError, match="workers"):
            StoreConfig(parallel_workers=0)

    def test_empty_alias(self):
        with pytest.raises(ValueError):
            KmsConfig(wrapping_alias="")

    def test_log_level(self):
        with pytest.raises(ValueError, match="log level"):
            LoggingConfig(level="LOUD")


class TestVaultConfig:
    def test_immutable(self):
        config = VaultConfig()
        with pytest.raises(AttributeError, match="immutable"):
            config._store = StoreConfig(table="other")

    def test_hash_tracks_content(self):
        assert VaultConfig().config_hash == VaultConfig().config_hash
        assert VaultConfig().config_hash != VaultConfig(store=StoreConfig(table="other")).config_hash

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("CREDVAULT_STORE__TABLE", "prod-credentials")
        monkeypatch.setenv("CREDVAULT_STORE__REGION", "eu-west-1")
        monkeypatch.setenv("CREDVAULT_STORE__PARALLEL_WORKERS", "2")
        monkeypatch.setenv("CREDVAULT_KMS__WRAPPING_ALIAS", "alias/prod")
        monkeypatch.setenv("CREDVAULT_LOGGING__LEVEL", "DEBUG")
        monkeypatch.setenv("CREDVAULT_LOGGING__ENABLE_JSON", "true")

        config = VaultConfig.load()

        assert config.store.table == "prod-credentials"
        assert config.store.region == "eu-west-1"
        assert config.store.parallel_workers == 2
        assert config.kms.wrapping_alias == "alias/prod"
        assert config.logging.level == "DEBUG"
        assert config.logging.enable_json is True

    def test_sensitive_env_keys_skipped(self, monkeypatch):
        monkeypatch.setenv("CREDVAULT_STORE__PASSWORD", "hunter2")
        assert "store.password" not in VaultConfig._parse_env_overrides("CREDVAULT")

    def test_custom_prefix(self, monkeypatch):
        monkeypatch.setenv("MYAPP_STORE__TABLE", "my-table")
        assert VaultConfig.load(env_prefix="MYAPP").store.table == "my-table"

    def test_repr(self):
        assert repr(VaultConfig()).startswith("VaultConfig(hash=")
