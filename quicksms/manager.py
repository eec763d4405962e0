"""
Main SmsDeviceManager class.

User-facing entry point that ties a driver registry to scanning and device
creation.
"""

import logging
from typing import Optional

from .config import DEFAULT_BAUDRATE, SerialSettings
from .core import LineEventBus, SerialTransport
from .device import SmsDevice
from .drivers import Driver, DriverRegistry, default_registry
from .scanner import Scanner, TransportFactory
from .types import ScanResult

logger = logging.getLogger(__name__)


class SmsDeviceManager:
    """
    Scans ports and opens devices against one driver registry.

    Build a single manager at startup and pass it to whatever needs devices.

    Example usage with context manager:

    .. code-block:: python

        manager = SmsDeviceManager()
        found = manager.scan("/dev/ttyUSB0")
        with manager.open(found.driver_id, "/dev/ttyUSB0") as device:
            print(device.read_field("IMEI").display)

    Example usage with manual lifecycle management:

    .. code-block:: python

        device = manager.open("quectel_ec2x", "COM3", 115200)
        # ... use device ...
        device.close()
    """

    def __init__(
        self,
        registry: Optional[DriverRegistry] = None,
        transport_factory: TransportFactory = SerialTransport,
        defaults: Optional[SerialSettings] = None
    ) -> None:
        """
        Initialize manager.

        Args:
            registry: Driver registry (default: bundled drivers)
            transport_factory: Builds transports from settings (override for testing)
            defaults: Settings template for timeouts and framing
        """
        self.registry = registry if registry is not None else default_registry()
        self.transport_factory = transport_factory
        self.defaults = defaults
        self.scan_events = LineEventBus()

        logger.info(f"Initialized SmsDeviceManager with drivers: {', '.join(d.id for d in self.registry)}")

    def drivers(self) -> list[Driver]:
        """Registered drivers in scan order."""
        return self.registry.drivers()

    def scan(self, port: str, baudrate: Optional[int] = None) -> ScanResult:
        """
        Identify the driver for the device on a port.

        Raises:
            PortUnavailableError: If the port cannot be opened
            NoDriverMatchedError: If no driver probe matched
            ScanTimeoutError: If nothing answered
        """
        scanner = Scanner(
            self.registry,
            transport_factory=self.transport_factory,
            events=self.scan_events,
            defaults=self.defaults
        )
        return scanner.scan(port, baudrate)

    def create(self, driver_id: str, port: str, baudrate: Optional[int] = None) -> SmsDevice:
        """
        Build an unopened device.

        Raises:
            UnknownDriverError: If driver_id is not registered
        """
        settings = self._settings(port, baudrate)
        transport = self.transport_factory(settings)
        return self.registry.create(driver_id, settings, transport=transport)

    def open(self, driver_id: str, port: str, baudrate: Optional[int] = None) -> SmsDevice:
        """
        Build and open a device.

        Raises:
            UnknownDriverError: If driver_id is not registered
            PortUnavailableError: If the port cannot be opened
        """
        return self.create(driver_id, port, baudrate).open()

    def _settings(self, port: str, baudrate: Optional[int]) -> SerialSettings:
        if self.defaults is not None:
            return self.defaults.with_port(port, baudrate)
        return SerialSettings(port=port, baudrate=baudrate or DEFAULT_BAUDRATE)
