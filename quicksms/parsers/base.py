"""
Base parser classes and utilities.

Provides reusable parsing functionality for command responses. Parsers
receive the response lines with command echo and the final OK removed.
"""

import logging
from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Optional

from ..exceptions import ParseError

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ResponseParser(ABC, Generic[T]):
    """
    Abstract base class for response parsers.

    Parsers convert raw command responses into typed data.
    """

    @abstractmethod
    def parse(self, response: list[str]) -> T:
        """
        Parse command response.

        Args:
            response: List of response lines from the device

        Returns:
            Parsed data

        Raises:
            ParseError: If response cannot be parsed
        """
        pass


def strip_prefix(line: str, prefix: Optional[str]) -> str:
    """Remove a "+CMD:" style prefix from a line if present."""
    if prefix and line.startswith(prefix):
        return line[len(prefix):].strip()
    return line.strip()


def find_prefixed(response: list[str], prefix: str) -> str:
    """
    Find the line carrying a prefix and return its payload.

    Lines without the prefix (unsolicited codes, blank lines) are skipped.

    Raises:
        ParseError: If no line carries the prefix
    """
    for line in response:
        if line.startswith(prefix):
            return strip_prefix(line, prefix)
    raise ParseError(f"No {prefix} line in response", response=response)


class SimpleValueParser(ResponseParser[str]):
    """Parser for single-line value responses (e.g., AT+CGMI)."""

    def __init__(self, prefix: Optional[str] = None):
        """
        Initialize parser.

        Args:
            prefix: Optional "+CMD:" prefix some firmwares put before the value
        """
        self.prefix = prefix

    def parse(self, response: list[str]) -> str:
        """Parse simple value response."""
        values = [line for line in response if line.strip()]
        if len(values) != 1:
            raise ParseError(
                f"Expected 1 line, got {len(values)}",
                response=response
            )
        return strip_prefix(values[0], self.prefix)


class CommaSeparatedParser(ResponseParser[list[str]]):
    """Parser for comma-separated values."""

    def __init__(self, prefix: Optional[str] = None, expected_parts: Optional[int] = None):
        """
        Initialize parser.

        Args:
            prefix: "+CMD:" prefix of the line to split
            expected_parts: Minimum number of parts (None = any)
        """
        self.prefix = prefix
        self.expected_parts = expected_parts

    def parse(self, response: list[str]) -> list[str]:
        """Parse comma-separated values."""
        if not response:
            raise ParseError("Empty response", response=response)

        line = find_prefixed(response, self.prefix) if self.prefix else response[0]
        parts = [p.strip().strip('"') for p in line.split(",")]

        if self.expected_parts is not None and len(parts) < self.expected_parts:
            raise ParseError(
                f"Expected {self.expected_parts} parts, got {len(parts)}",
                response=response
            )

        return parts
