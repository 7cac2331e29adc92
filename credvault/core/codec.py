"""
Storage Codec
=============

Textual encodings used by the persisted Secret Item attributes.

Attribute Formats:
    - key, contents: standard base64
    - hmac: lowercase hex (a binary attribute holding the hex text is
      accepted on read)
    - version: decimal integer zero-padded to VERSION_WIDTH digits
"""

from __future__ import annotations

import binascii
import json
import re
from base64 import b64decode, b64encode
from typing import Final, Iterable, Mapping, Union

from credvault.core.errors import InvalidContextError, InvalidVersionError

# 19 digits hold any non-negative signed 64-bit value
VERSION_WIDTH: Final[int] = 19

_DECIMAL: Final[re.Pattern[str]] = re.compile(r"\s*([0-9]+)\s*")


def encode_binary(data: bytes) -> str:
    """Encode bytes as standard base64 text."""
    return b64encode(data).decode("ascii")


def decode_binary(text: str) -> bytes:
    """
    Decode standard base64 text.

    Raises:
        ValueError: If the text is not valid base64
    """
    try:
        return b64decode(text, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 attribute: {e}") from e


def encode_mac(tag: bytes) -> str:
    """Encode an HMAC tag as hex text."""
    return tag.hex()


def decode_mac(value: Union[str, bytes]) -> bytes:
    """
    Decode a stored HMAC attribute.

    The attribute is normally hex text. Some writers store the same hex
    text inside a binary attribute, which arrives here as bytes.
    """
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("ascii")
    try:
        return bytes.fromhex(value)
    except ValueError as e:
        raise ValueError(f"Invalid hex HMAC attribute: {e}") from e


def parse_int(text: str) -> int:
    """
    Parse a decimal version label.

    Surrounding whitespace and leading zeros are accepted. Anything else
    (empty text, signs, fractions, letters) raises instead of defaulting.

    Raises:
        InvalidVersionError: If the text is not a non-negative integer
    """
    if not isinstance(text, str):
        raise InvalidVersionError(f"Version must be text, got {type(text).__name__}")
    match = _DECIMAL.fullmatch(text)
    if match is None:
        raise InvalidVersionError(f"Invalid version: {text!r}")
    return int(match.group(1))


def format_version(version: Union[int, str]) -> str:
    """
    Produce the persisted form of a version label.

    Padding makes the store's lexicographic sort order agree with
    numeric order, so "10" sorts after "9".
    """
    if isinstance(version, bool):
        raise InvalidVersionError(f"Invalid version: {version!r}")
    if isinstance(version, int):
        number = version
    else:
        number = parse_int(version)
    if number < 0:
        raise InvalidVersionError(f"Version must be non-negative: {number}")
    text = str(number)
    if len(text) > VERSION_WIDTH:
        raise InvalidVersionError(f"Version too large: {number}")
    return text.zfill(VERSION_WIDTH)


def parse_context(pairs: Iterable[str]) -> dict[str, str]:
    """
    Build an encryption context from ``key=value`` pairs.

    Raises:
        InvalidContextError: If a pair has no '=' or an empty key
    """
    context: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise InvalidContextError(f"Invalid context pair: {pair!r} (expected key=value)")
        context[key] = value
    return context


def to_json(values: Mapping[str, str]) -> str:
    """Serialize a name to value mapping as a stable JSON document."""
    return json.dumps(dict(values), indent=2, sort_keys=True, ensure_ascii=False)
