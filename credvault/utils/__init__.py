"""
Utils module - Utility functions and helpers.

This module contains utility functions used throughout credvault.
"""

from credvault.utils.validators import ValidationError, validate_secret_name, validate_string_safe

__all__ = [
    "ValidationError",
    "validate_secret_name",
    "validate_string_safe",
]
