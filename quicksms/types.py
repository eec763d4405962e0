"""
Data types and structures for QuickSMS.

Provides type-safe representations of device data.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum, Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .exceptions import FieldError


class RegistrationState(IntEnum):
    """Network registration status values."""
    NOT_REGISTERED = 0
    REGISTERED_HOME = 1
    SEARCHING = 2
    DENIED = 3
    UNKNOWN = 4
    REGISTERED_ROAMING = 5


class LineDirection(Enum):
    """Direction of a line crossing the transport."""
    SENT = "TX"
    RECEIVED = "RX"


class CommandEncoding(Enum):
    """How a raw command payload is put on the wire."""
    TEXT = "text"
    HEX = "hex"


class ContentEncoding(Enum):
    """How a driver encodes SMS destination and body."""
    TEXT = "text"   # GSM character set, sent as-is
    UCS2 = "ucs2"   # UTF-16BE as uppercase hex


@dataclass(frozen=True)
class LineEvent:
    """A single line sent to or received from the device."""
    direction: LineDirection
    line: str
    timestamp: datetime

    def __str__(self) -> str:
        return f"{self.timestamp.strftime('%H:%M:%S.%f')[:-2]} {self.direction.value} {self.line}"


@dataclass(frozen=True)
class ScanResult:
    """Driver identified on a port by a scan."""
    driver_id: str
    name: str


@dataclass(frozen=True)
class FieldResult:
    """
    Last known value of a status field, or the error that replaced it.

    Exactly one of value/error is set, except for an empty result that marks
    a field which has not been read since the device was opened.
    """
    name: str
    value: Optional[str] = None
    error: Optional["FieldError"] = None

    @classmethod
    def empty(cls, name: str) -> "FieldResult":
        return cls(name=name)

    @classmethod
    def success(cls, name: str, value: str) -> "FieldResult":
        return cls(name=name, value=value)

    @classmethod
    def failure(cls, name: str, error: "FieldError") -> "FieldResult":
        return cls(name=name, error=error)

    @property
    def ok(self) -> bool:
        """True if the field holds a value."""
        return self.error is None and self.value is not None

    @property
    def is_empty(self) -> bool:
        return self.error is None and self.value is None

    @property
    def display(self) -> str:
        """Text suitable for a status table cell."""
        if self.error is not None:
            return f"Failed: {self.error}"
        return self.value or ""

    def unwrap(self) -> str:
        """
        Return the value or raise the stored error.

        Raises:
            FieldError: If the result is an error or empty
        """
        if self.error is not None:
            raise self.error
        if self.value is None:
            from .exceptions import FieldError
            raise FieldError("Field has not been read", field=self.name)
        return self.value


@dataclass
class SignalQuality:
    """
    Signal quality from AT+CSQ.

    RSSI (Received Signal Strength Indicator):
        0: -113 dBm or less
        1: -111 dBm
        2...30: -109 to -53 dBm
        31: -51 dBm or greater
        99: Not known or not detectable

    BER (Bit Error Rate):
        0...7: As specified in 3GPP TS 45.008
        99: Not known or not detectable
    """
    rssi: int
    ber: int

    @property
    def rssi_dbm(self) -> Optional[int]:
        """Convert RSSI to dBm value."""
        if self.rssi == 99:
            return None
        if self.rssi == 0:
            return -113
        if self.rssi == 31:
            return -51
        return -113 + (self.rssi * 2)

    @property
    def is_valid(self) -> bool:
        """Check if signal quality reading is valid."""
        return self.rssi != 99
