"""
Response parsers for command responses.

Provides parsing of device responses into display values.
"""

from .base import (
    ResponseParser,
    SimpleValueParser,
    CommaSeparatedParser,
    find_prefixed,
)
from .status import (
    PrefixedValueParser,
    SignalQualityParser,
    RegistrationParser,
    OperatorParser,
    BatteryParser,
    Ucs2AwareParser,
    PHONE_NUMBER_PATTERN,
)

__all__ = [
    "ResponseParser",
    "SimpleValueParser",
    "CommaSeparatedParser",
    "find_prefixed",
    "PrefixedValueParser",
    "SignalQualityParser",
    "RegistrationParser",
    "OperatorParser",
    "BatteryParser",
    "Ucs2AwareParser",
    "PHONE_NUMBER_PATTERN",
]
