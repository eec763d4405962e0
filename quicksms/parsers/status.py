"""
Status field parsers.

Turn responses of common 3GPP TS 27.007 queries into display strings.
"""

import logging
import re
from typing import Optional

from .base import ResponseParser, CommaSeparatedParser, find_prefixed
from ..codec import decode_ucs2_hex
from ..types import RegistrationState, SignalQuality
from ..exceptions import ParseError

logger = logging.getLogger(__name__)

# Dialable address: digits, "+", "*" and "#"
PHONE_NUMBER_PATTERN = r"[0-9+*#]+"


class PrefixedValueParser(ResponseParser[str]):
    """
    Parser for "+CMD: a,b,c" responses.

    Returns the whole payload, or one comma-separated part of it.
    """

    def __init__(self, prefix: str, index: Optional[int] = None):
        """
        Initialize parser.

        Args:
            prefix: Response prefix (e.g., "+CSCA:")
            index: Part to return (None = whole payload, quotes removed)
        """
        self.prefix = prefix
        self.index = index
        self._split = CommaSeparatedParser(prefix=prefix)

    def parse(self, response: list[str]) -> str:
        if self.index is None:
            return find_prefixed(response, self.prefix).strip('"')

        parts = self._split.parse(response)
        try:
            return parts[self.index]
        except IndexError as e:
            raise ParseError(
                f"No part {self.index} in {self.prefix} response",
                response=response
            ) from e


class SignalQualityParser(ResponseParser[str]):
    """Parser for AT+CSQ (signal quality) response."""

    def parse(self, response: list[str]) -> str:
        """
        Parse AT+CSQ response.

        Expected format: "+CSQ: 24,99"
        """
        payload = find_prefixed(response, "+CSQ:")
        try:
            rssi_str, ber_str = payload.split(",")
            signal = SignalQuality(rssi=int(rssi_str), ber=int(ber_str))
        except ValueError as e:
            raise ParseError(
                f"Failed to parse signal quality: {payload}",
                command="AT+CSQ",
                response=response
            ) from e

        if not signal.is_valid:
            return f"No signal (rssi={signal.rssi}, ber={signal.ber})"
        return f"{signal.rssi_dbm} dBm (rssi={signal.rssi}, ber={signal.ber})"


class RegistrationParser(ResponseParser[str]):
    """
    Parser for AT+CREG? / AT+CGREG? responses.

    Expected format: "+CREG: 0,1" or '+CREG: 2,1,"1A2B","00012345",7'
    """

    def __init__(self, prefix: str = "+CREG:"):
        self._split = CommaSeparatedParser(prefix=prefix, expected_parts=2)

    def parse(self, response: list[str]) -> str:
        parts = self._split.parse(response)
        try:
            state = RegistrationState(int(parts[1]))
        except ValueError as e:
            raise ParseError(
                f"Unknown registration status: {parts[1]}",
                response=response
            ) from e

        text = state.name.replace("_", " ").title()
        if len(parts) >= 4 and parts[2] and parts[3]:
            text += f" (LAC={parts[2]}, CI={parts[3]})"
        return text


class OperatorParser(ResponseParser[str]):
    """
    Parser for AT+COPS? (current operator) response.

    Expected format: '+COPS: 0,0,"CHINA MOBILE",7' or "+COPS: 0" when unregistered
    """

    def parse(self, response: list[str]) -> str:
        parts = CommaSeparatedParser(prefix="+COPS:").parse(response)
        if len(parts) < 3 or not parts[2]:
            return "No operator"
        return parts[2]


class BatteryParser(ResponseParser[str]):
    """
    Parser for AT+CBC (battery charge) response.

    Expected format: "+CBC: 0,95,4200" (charging state, percent, millivolts)
    """

    def parse(self, response: list[str]) -> str:
        parts = CommaSeparatedParser(prefix="+CBC:", expected_parts=3).parse(response)
        try:
            percent = int(parts[1])
            millivolts = int(parts[2])
        except ValueError as e:
            raise ParseError(f"Failed to parse battery status: {parts}", response=response) from e

        charging = " charging" if parts[0] == "1" else ""
        return f"{percent}% ({millivolts / 1000:.3f} V){charging}"


class Ucs2AwareParser(ResponseParser[str]):
    """
    Wraps a parser and decodes its result when it is UCS2 hex.

    Devices left in the UCS2 character set report strings such as the SMS
    center address as hex. Plain values can look like hex too ("10086000"),
    so with an accept pattern the decoded text is only used when it matches.
    """

    def __init__(self, inner: ResponseParser[str], accept: Optional[str] = None):
        """
        Initialize parser.

        Args:
            inner: Parser producing the raw value
            accept: Regular expression the decoded text must fully match
        """
        self.inner = inner
        self.accept = re.compile(accept) if accept is not None else None

    def parse(self, response: list[str]) -> str:
        value = self.inner.parse(response)
        decoded = decode_ucs2_hex(value)
        if decoded is None:
            return value
        if self.accept is not None and not self.accept.fullmatch(decoded):
            logger.debug(f"Keeping {value!r}, UCS2 reading {decoded!r} is not plausible")
            return value
        logger.debug(f"Decoded UCS2 value {value!r} -> {decoded!r}")
        return decoded
