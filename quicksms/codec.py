"""
Text codecs for SMS content and raw commands.

- GSM 7-bit alphabet membership and message part counting
- UCS2 hex encoding used by the "UCS2" character set (AT+CSCS="UCS2")
- Hex rendering of raw command payloads
"""

import re
from typing import Optional

CTRL_Z = "\x1a"
ESC = "\x1b"

# GSM 7-bit default alphabet
GSM7_BASIC = (
    "@£$¥èéùìòÇ\nØø\rÅåΔ_ΦΓΛΩΠΨΣΘΞ\x1bÆæßÉ !\"#¤%&'()*+,-./0123456789:;<=>?"
    "¡ABCDEFGHIJKLMNOPQRSTUVWXYZÄÖÑÜ§¿abcdefghijklmnopqrstuvwxyzäöñüà"
)

# GSM 7-bit extended characters (escaped with 0x1B, cost two septets)
GSM7_EXTENDED = frozenset("\f^{}\\[~]|€")

_UCS2_HEX_RE = re.compile(r"^(?:[0-9A-Fa-f]{4})+$")


def is_gsm7(text: str) -> bool:
    """Check if text can be sent with the GSM 7-bit alphabet."""
    return all(c in GSM7_BASIC or c in GSM7_EXTENDED for c in text)


def calculate_sms_parts(text: str, ucs2: Optional[bool] = None) -> int:
    """
    Calculate number of SMS parts needed for text.

    Args:
        text: Message text
        ucs2: Force UCS2 (True) or GSM 7-bit (False); None picks automatically

    Returns:
        Number of SMS parts required
    """
    if ucs2 is None:
        ucs2 = not is_gsm7(text)

    if ucs2:
        # Single SMS: 70 chars, Concatenated: 67 chars per part
        length = len(text.encode("utf-16-be")) // 2
        return 1 if length <= 70 else (length + 66) // 67

    # Extended chars count as 2 septets
    septets = sum(2 if c in GSM7_EXTENDED else 1 for c in text)
    # Single SMS: 160 chars, Concatenated: 153 chars per part
    return 1 if septets <= 160 else (septets + 152) // 153


def encode_ucs2_hex(text: str) -> str:
    """
    Encode text as UCS2 (UTF-16 BE) uppercase hex.

    Example: "Hi" -> "00480069"
    """
    return text.encode("utf-16-be").hex().upper()


def decode_ucs2_hex(value: str) -> Optional[str]:
    """
    Decode UCS2 hex back to text.

    Returns:
        Decoded text, or None if value is not plausible UCS2 hex
    """
    if not _UCS2_HEX_RE.match(value):
        return None
    try:
        return bytes.fromhex(value).decode("utf-16-be")
    except UnicodeDecodeError:
        return None


def text_to_hex(text: str, encoding: str = "utf-8") -> str:
    """
    Render a command payload as uppercase hex of its encoded bytes.

    Example: "AT" -> "4154"
    """
    return text.encode(encoding).hex().upper()
