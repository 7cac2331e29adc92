"""Tests for credvault.core.codec: attribute encodings and version labels."""

import pytest

from credvault.core.codec import (
    VERSION_WIDTH,
    decode_binary,
    decode_mac,
    encode_binary,
    encode_mac,
    format_version,
    parse_context,
    parse_int,
    to_json,
)
from credvault.core.errors import InvalidContextError, InvalidVersionError


class TestBinaryFields:
    def test_base64_is_standard_alphabet(self):
        assert encode_binary(b"\xfb\xff") == "+/8="
        assert decode_binary("+/8=") == b"\xfb\xff"

    def test_invalid_base64_rejected(self):
        with pytest.raises(ValueError, match="base64"):
            decode_binary("not base64!")

    def test_mac_is_hex(self):
        assert encode_mac(b"\x00\xab") == "00ab"
        assert decode_mac("00ab") == b"\x00\xab"

    def test_mac_in_binary_attribute(self):
        # binary attribute variant holds the hex text itself
        assert decode_mac(b"00ab") == b"\x00\xab"

    def test_invalid_hex_rejected(self):
        with pytest.raises(ValueError, match="hex"):
            decode_mac("zz")


class TestParseInt:
    @pytest.mark.parametrize("text,expected", [
        ("0", 0),
        ("7", 7),
        ("0000000000000000010", 10),
        (" 42 ", 42),
    ])
    def test_valid(self, text, expected):
        assert parse_int(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "-1", "+1", "1.5", "1e3", "0x10"])
    def test_invalid_fails_closed(self, text):
        with pytest.raises(InvalidVersionError):
            parse_int(text)

    def test_invalid_is_value_error(self):
        with pytest.raises(ValueError):
            parse_int("latest")


class TestFormatVersion:
    def test_padded(self):
        assert format_version(1) == "0" * (VERSION_WIDTH - 1) + "1"
        assert len(format_version("123")) == VERSION_WIDTH

    def test_padding_preserves_numeric_order(self):
        assert format_version(9) < format_version(10)

    def test_rejects_negative(self):
        with pytest.raises(InvalidVersionError):
            format_version(-1)

    def test_rejects_bool(self):
        with pytest.raises(InvalidVersionError):
            format_version(True)

    def test_rejects_too_large(self):
        with pytest.raises(InvalidVersionError, match="too large"):
            format_version(10 ** VERSION_WIDTH)


class TestParseContext:
    def test_pairs(self):
        assert parse_context(["env=prod", "app=api"]) == {"env": "prod", "app": "api"}

    def test_value_may_contain_equals(self):
        assert parse_context(["q=a=b"]) == {"q": "a=b"}

    def test_empty(self):
        assert parse_context([]) == {}

    @pytest.mark.parametrize("pair", ["noequals", "=value"])
    def test_malformed(self, pair):
        with pytest.raises(InvalidContextError):
            parse_context([pair])


class TestToJson:
    def test_sorted_object(self):
        assert to_json({"b": "2", "a": "1"}) == '{\n  "a": "1",\n  "b": "2"\n}'
