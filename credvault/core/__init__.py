"""
Core module - Contains configuration, logging, errors and the storage codec.
"""

from credvault.core.config import VaultConfig
from credvault.core.logging import configure_logging, get_secure_logger, SecureLogFilter

__all__ = ["VaultConfig", "configure_logging", "get_secure_logger", "SecureLogFilter"]
