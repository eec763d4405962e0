"""
Tests for message and command template substitution.
"""

import re
from datetime import datetime

from quicksms.template import device_tokens, message_tokens, render_template

NOW = datetime(2026, 5, 17, 9, 5, 3)


def test_device_tokens():
    """Test the documented example renders device, port, baud rate and time."""
    tokens = message_tokens("SIM900", "COM3", 115200, now=NOW)

    result = render_template("{device}({portName},{baudRate}),{time}", tokens)

    assert result.startswith("SIM900(COM3,115200),")
    assert result == "SIM900(COM3,115200),2026-05-17 09:05:03"


def test_guid_is_fresh_hex():
    """Test {guid} is 32 hex digits and differs between renderings."""
    first = render_template("{guid}", message_tokens("SIM900", "COM3", 115200))
    second = render_template("{guid}", message_tokens("SIM900", "COM3", 115200))

    assert re.fullmatch(r"[0-9a-f]{32}", first)
    assert first != second


def test_unknown_tokens_left_literal():
    """Test unrecognized tokens survive substitution."""
    tokens = device_tokens("SIM900", "COM3", 115200)

    assert render_template("{device} {unknown} {time}", tokens) == "SIM900 {unknown} {time}"


def test_tokens_substituted_independently():
    """Test each token is replaced where it appears, repeatedly if needed."""
    tokens = device_tokens("EC25", "/dev/ttyUSB2", 9600)

    result = render_template("{portName}/{portName}@{baudRate}", tokens)

    assert result == "/dev/ttyUSB2//dev/ttyUSB2@9600"


def test_substituted_values_not_reexpanded():
    """Test token values containing braces are inserted as-is."""
    tokens = {"value": "{device}", "device": "SIM900"}

    assert render_template('AT+CSCA="{value}"', tokens) == 'AT+CSCA="{device}"'


def test_text_without_tokens():
    assert render_template("Hello {", {}) == "Hello {"
