"""
Device dialect drivers.

- base: Driver, StatusField and SendProfile data model
- registry: DriverRegistry and the bundled default registry
- simcom, quectel, generic: bundled drivers
"""

from .base import Driver, SendProfile, StatusField
from .registry import DeviceFactory, DriverRegistry, default_registry
from .generic import GENERIC
from .quectel import QUECTEL_EC2X
from .simcom import SIM900

__all__ = [
    "Driver",
    "SendProfile",
    "StatusField",
    "DeviceFactory",
    "DriverRegistry",
    "default_registry",
    "GENERIC",
    "QUECTEL_EC2X",
    "SIM900",
]
