"""
QuickSMS - Python library for driving SMS modems over serial ports.
"""

from .version import __version__
from .manager import SmsDeviceManager
from .device import SmsDevice
from .worker import DeviceWorker
from .scanner import Scanner
from .config import SerialSettings
from .core import MockTransport, SerialTransport, LineEventBus
from .drivers import Driver, DriverRegistry, SendProfile, StatusField, default_registry

from .types import (
    CommandEncoding,
    ContentEncoding,
    FieldResult,
    LineDirection,
    LineEvent,
    ScanResult,
)

from .exceptions import (
    SmsDeviceError,
    TransportError,
    PortUnavailableError,
    TransportClosedError,
    DeviceDisconnectedError,
    CommandTimeoutError,
    ScanTimeoutError,
    FramingError,
    CommandError,
    ParseError,
    NoDriverMatchedError,
    UnknownDriverError,
    DeviceClosedError,
    FieldError,
    UnknownFieldError,
    SendError,
)

__all__ = [
    "__version__",
    "SmsDeviceManager",
    "SmsDevice",
    "DeviceWorker",
    "Scanner",
    "SerialSettings",
    "MockTransport",
    "SerialTransport",
    "LineEventBus",
    "Driver",
    "DriverRegistry",
    "SendProfile",
    "StatusField",
    "default_registry",
    "CommandEncoding",
    "ContentEncoding",
    "FieldResult",
    "LineDirection",
    "LineEvent",
    "ScanResult",
    "SmsDeviceError",
    "TransportError",
    "PortUnavailableError",
    "TransportClosedError",
    "DeviceDisconnectedError",
    "CommandTimeoutError",
    "ScanTimeoutError",
    "FramingError",
    "CommandError",
    "ParseError",
    "NoDriverMatchedError",
    "UnknownDriverError",
    "DeviceClosedError",
    "FieldError",
    "UnknownFieldError",
    "SendError",
]
