"""
Tests for SMS text codecs.
"""

import pytest

from quicksms.codec import (
    calculate_sms_parts,
    decode_ucs2_hex,
    encode_ucs2_hex,
    is_gsm7,
    text_to_hex,
)


class TestGsm7:

    def test_plain_ascii(self):
        assert is_gsm7("Hello World 123")

    def test_extended_characters(self):
        assert is_gsm7("Price: 5€ [sale]")

    def test_unicode_not_gsm7(self):
        assert not is_gsm7("你好")


class TestSmsParts:
    """Test message segmentation."""

    def test_single_part(self):
        assert calculate_sms_parts("A" * 160) == 1

    def test_concatenated(self):
        assert calculate_sms_parts("A" * 161) == 2
        assert calculate_sms_parts("A" * 306) == 2
        assert calculate_sms_parts("A" * 307) == 3

    def test_extended_characters_count_double(self):
        assert calculate_sms_parts("€" * 80) == 1
        assert calculate_sms_parts("€" * 81) == 2

    def test_ucs2_limits(self):
        assert calculate_sms_parts("你" * 70) == 1
        assert calculate_sms_parts("你" * 71) == 2

    def test_forced_ucs2(self):
        assert calculate_sms_parts("A" * 71, ucs2=True) == 2


class TestUcs2Hex:

    def test_encode(self):
        assert encode_ucs2_hex("Hi") == "00480069"

    def test_encode_unicode(self):
        assert encode_ucs2_hex("你好") == "4F60597D"

    def test_decode(self):
        assert decode_ucs2_hex("4F60597D") == "你好"

    @pytest.mark.parametrize("value", ["+8613800100500", "GSM", "123", ""])
    def test_decode_rejects_non_hex(self, value):
        assert decode_ucs2_hex(value) is None

    def test_decode_rejects_lone_surrogate(self):
        assert decode_ucs2_hex("D800") is None


class TestTextToHex:
    """Test hex rendering of raw commands."""

    def test_at(self):
        assert text_to_hex("AT") == "4154"

    def test_command(self):
        assert text_to_hex("AT+CSQ") == "41542B435351"

    def test_encoding(self):
        assert text_to_hex("é", "latin-1") == "E9"
