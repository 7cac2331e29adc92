"""
Validation Utilities
====================

Input validation for values that become store keys.
"""

from __future__ import annotations

from typing import Final

# DynamoDB caps a partition key at 2048 bytes
MAX_NAME_BYTES: Final[int] = 2048


class ValidationError(ValueError):
    """Raised when validation fails."""
    pass


def validate_string_safe(
    value: str,
    min_length: int = 0,
    max_length: int = 1000,
    allow_empty: bool = False,
    field_name: str = "value",
) -> str:
    """
    Validate a string value for safety.

    Args:
        value: The string to validate
        min_length: Minimum allowed length
        max_length: Maximum allowed length
        allow_empty: If False, empty strings are rejected
        field_name: Name of the field for error messages

    Returns:
        Validated string

    Raises:
        ValidationError: If validation fails
    """
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")

    if not allow_empty and not value:
        raise ValidationError(f"{field_name} cannot be empty")

    if len(value) < min_length:
        raise ValidationError(
            f"{field_name} must be at least {min_length} characters"
        )

    if len(value) > max_length:
        raise ValidationError(
            f"{field_name} must be at most {max_length} characters"
        )

    # Check for null bytes (security risk)
    if "\x00" in value:
        raise ValidationError(f"{field_name} contains invalid characters")

    return value


def validate_secret_name(name: str) -> str:
    """
    Validate a secret name before it is used as a partition key.

    Raises:
        ValidationError: If the name is empty, too long or has null bytes
    """
    validate_string_safe(name, max_length=MAX_NAME_BYTES, field_name="name")
    if len(name.encode("utf-8")) > MAX_NAME_BYTES:
        raise ValidationError(f"name must be at most {MAX_NAME_BYTES} bytes")
    return name
